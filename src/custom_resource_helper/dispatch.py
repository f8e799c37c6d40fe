"""Routing of custom resource events to their lifecycle handlers."""

__all__ = [
    "REQUEST_TYPE_HANDLERS",
    "dispatch",
    "invoke_handler",
    "to_handler_result",
]

import asyncio
import inspect
from concurrent.futures import Executor
from functools import partial
from typing import Any, Callable, Optional

import marshmallow as mm
from aws_lambda_powertools.utilities.typing import LambdaContext

from custom_resource_helper.common.logging import LoggerLike
from custom_resource_helper.exceptions import InvalidHandlerResultError, InvalidRequestTypeError
from custom_resource_helper.models import (
    NONE_PHYSICAL_RESOURCE_ID,
    CustomResourceEvent,
    HandlerResult,
)

REQUEST_TYPE_HANDLERS = {
    "Create": "on_create",
    "Update": "on_update",
    "Delete": "on_delete",
}
"""Maps each RequestType to the attribute holding its handler."""


async def invoke_handler(
    fn: Callable[..., Any], *args: Any, executor: Optional[Executor] = None
) -> Any:
    """Call a handler that may be a coroutine function or a plain function.

    Plain functions run in ``executor`` (or the loop's default executor) so
    that they do not block the event loop.
    """
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(executor, partial(fn, *args))
    if inspect.isawaitable(result):
        result = await result
    return result


def to_handler_result(value: Any, request_type: str) -> HandlerResult:
    """Normalize the return value of a Create/Update handler.

    Args:
        value (Any): A HandlerResult or a mapping with a physical resource id and
            optional data (``PhysicalResourceId``/``Data`` keys are accepted).
        request_type (str): The request type, used in error messages.

    Raises:
        InvalidHandlerResultError: If no HandlerResult can be built from value.

    Returns:
        The handler result.
    """
    if isinstance(value, HandlerResult):
        return value
    if isinstance(value, dict):
        try:
            return HandlerResult.from_dict(value)
        except mm.ValidationError as e:
            raise InvalidHandlerResultError(
                f"{request_type} handler returned an invalid result: {e.messages}"
            ) from e
    raise InvalidHandlerResultError(
        f"{request_type} handler must return a HandlerResult, got {type(value).__name__}"
    )


async def dispatch(
    event: CustomResourceEvent,
    context: LambdaContext,
    resource_handler: Any,
    logger: LoggerLike,
    executor: Optional[Executor] = None,
) -> HandlerResult:
    """Invoke the handler registered for the event's RequestType.

    A RequestType without a registered handler is treated as a success with
    physical resource id "None" and no data. Errors raised by the handler
    propagate unchanged.

    Args:
        event (CustomResourceEvent): The incoming event.
        context (LambdaContext): The invocation context.
        resource_handler (Any): A ResourceHandler, or any object exposing
            ``on_create``/``on_update``/``on_delete`` attributes.
        logger (LoggerLike): Logger of the current invocation, passed to the handler.
        executor (Optional[Executor]): Executor used for plain function handlers.

    Raises:
        InvalidRequestTypeError: If the RequestType is not Create, Update or Delete.

    Returns:
        The result to report to CloudFormation.
    """
    logger.debug(event.raw_event)

    request_type = event.get("RequestType")
    if request_type not in REQUEST_TYPE_HANDLERS:
        raise InvalidRequestTypeError(f"Invalid RequestType received: {request_type}")

    result = HandlerResult(physical_resource_id=NONE_PHYSICAL_RESOURCE_ID, response_data={})

    handler = getattr(resource_handler, REQUEST_TYPE_HANDLERS[request_type], None)
    if handler is None:
        logger.info(f"No handler registered for {request_type} requests")
        return result

    value = await invoke_handler(handler, event, context, logger, executor=executor)
    if request_type == "Delete":
        return result
    return to_handler_result(value, request_type)
