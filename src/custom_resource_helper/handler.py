"""Lambda entry point for CloudFormation custom resources.

The entry point races the resource handler against the deadline guard and
answers CloudFormation exactly once: SUCCESS with the handler's result, or
FAILED with the error message of whatever went wrong.
"""

__all__ = [
    "LambdaHandlerType",
    "CustomResourceHandler",
    "custom_resource_helper",
]

import asyncio
import inspect
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from aws_lambda_powertools.utilities.typing import LambdaContext

from custom_resource_helper.common.logging import LogFactory, LoggerLike, default_log_factory
from custom_resource_helper.dispatch import dispatch
from custom_resource_helper.exceptions import CustomResourceError
from custom_resource_helper.models import (
    CustomResourceEvent,
    HandlerResult,
    ResourceHandler,
    ResourceHandlerFactory,
)
from custom_resource_helper.response import CustomResourceResponder
from custom_resource_helper.timeout import SAFETY_MARGIN_MS, deadline_guard

LambdaEvent = Union[Dict[str, Any], CustomResourceEvent]
LambdaHandlerType = Callable[[LambdaEvent, LambdaContext], None]


@dataclass
class CustomResourceHandler:
    """Adapts resource lifecycle callables to the custom resource protocol.

    A fresh logger and resource handler are built for every invocation. Any
    failure, including a timeout or an error from the factories, is reported
    to CloudFormation as FAILED. Only a failure to deliver the response
    escapes the handler.

    Attributes:
        resource_handler_factory: Called with the invocation logger, returns the
            ResourceHandler (or an awaitable of it).
        log_factory: Optional ``(event, context) -> logger`` replacing the default logger.
        safety_margin_ms: Time reserved to answer before the execution deadline.

    Example:
        ```python
        async def on_create(event, context, logger):
            return HandlerResult(physical_resource_id="my-resource")

        handler = CustomResourceHandler(
            lambda logger: ResourceHandler(on_create=on_create)
        ).get_handler()
        ```
    """

    resource_handler_factory: ResourceHandlerFactory
    log_factory: Optional[LogFactory] = None
    safety_margin_ms: int = SAFETY_MARGIN_MS

    async def handle(self, event: LambdaEvent, context: LambdaContext) -> None:
        """Handle one custom resource request and send its response.

        Args:
            event (LambdaEvent): The CloudFormation custom resource event.
            context (LambdaContext): The invocation context.

        Raises:
            ResponseDeliveryError: If the response could not be sent.
        """
        if not isinstance(event, CustomResourceEvent):
            event = CustomResourceEvent(event)

        logger: LoggerLike = default_log_factory(event)
        try:
            if self.log_factory is not None:
                logger = self.log_factory(event, context)
            logger.info(
                f"Received {event.get('RequestType')} request {event.get('RequestId')} "
                f"for {event.get('LogicalResourceId')}"
            )
            resource_handler = await self.build_resource_handler(logger)
            result = await self.race(event, context, resource_handler, logger)
        except Exception as e:
            logger.error(f"Failed to handle custom resource request: {e!r}", exc_info=True)
            CustomResourceResponder(event, context, logger).failure(e)
            return

        CustomResourceResponder(event, context, logger).success(result)

    async def build_resource_handler(self, logger: LoggerLike) -> ResourceHandler:
        resource_handler = self.resource_handler_factory(logger)
        if inspect.isawaitable(resource_handler):
            resource_handler = await resource_handler
        return resource_handler

    async def race(
        self,
        event: CustomResourceEvent,
        context: LambdaContext,
        resource_handler: ResourceHandler,
        logger: LoggerLike,
    ) -> HandlerResult:
        """Run the dispatcher against the deadline guard.

        Whichever settles first decides the outcome and the other is cancelled.
        If both settle in the same iteration the dispatcher wins. Plain function
        handlers still running in their worker thread are abandoned.

        Raises:
            ExecutionTimeoutError: If the deadline guard settles first.
            CustomResourceError: If the handler ended cancelled.

        Returns:
            The dispatcher's result.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="custom-resource")
        dispatch_task = asyncio.ensure_future(
            dispatch(event, context, resource_handler, logger, executor=executor)
        )
        guard_task = asyncio.ensure_future(
            deadline_guard(context, logger, safety_margin_ms=self.safety_margin_ms)
        )
        try:
            done, _ = await asyncio.wait(
                {dispatch_task, guard_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            dispatch_task.cancel()
            guard_task.cancel()
            executor.shutdown(wait=False)

        winner = dispatch_task if dispatch_task in done else guard_task
        if winner.cancelled():
            # the handler let a CancelledError escape
            raise CustomResourceError("Handler was cancelled")
        for task in done - {winner}:
            # mark the loser's outcome as retrieved
            if not task.cancelled():
                task.exception()
        return winner.result()

    def get_handler(self) -> LambdaHandlerType:
        """Create the synchronous Lambda handler function.

        Returns:
            A callable suitable as an AWS Lambda entry point.
        """

        def handler(event: LambdaEvent, context: LambdaContext) -> None:
            asyncio.run(self.handle(event, context))

        return handler


def custom_resource_helper(
    resource_handler_factory: ResourceHandlerFactory,
    log_factory: Optional[LogFactory] = None,
) -> LambdaHandlerType:
    """Create a Lambda handler for a custom resource.

    Args:
        resource_handler_factory (ResourceHandlerFactory): Builds the ResourceHandler
            for each invocation. Receives the invocation logger and may be async.
        log_factory (Optional[LogFactory]): Replaces the default logger.

    Returns:
        The Lambda entry point.
    """
    return CustomResourceHandler(
        resource_handler_factory=resource_handler_factory, log_factory=log_factory
    ).get_handler()
