"""Deadline guard for custom resource invocations."""

__all__ = [
    "SAFETY_MARGIN_MS",
    "TIMEOUT_REASON",
    "deadline_guard",
]

import asyncio
from typing import NoReturn

from aws_lambda_powertools.utilities.typing import LambdaContext

from custom_resource_helper.common.logging import LoggerLike
from custom_resource_helper.exceptions import ExecutionTimeoutError

SAFETY_MARGIN_MS = 3000
"""Time kept in reserve to send the FAILED response before the host kills the invocation."""

TIMEOUT_REASON = "Execution timed out"


async def deadline_guard(
    context: LambdaContext, logger: LoggerLike, safety_margin_ms: int = SAFETY_MARGIN_MS
) -> NoReturn:
    """Fail shortly before the invocation reaches its execution deadline.

    The guard only looks at the remaining time reported by the context when it
    starts. If less than the safety margin remains, it fails right away.

    Args:
        context (LambdaContext): The invocation context.
        logger (LoggerLike): Logger of the current invocation.
        safety_margin_ms (int): Milliseconds reserved for sending the response.

    Raises:
        ExecutionTimeoutError: Always, once the deadline minus the margin is reached.
    """
    delay_ms = max(context.get_remaining_time_in_millis() - safety_margin_ms, 0)
    await asyncio.sleep(delay_ms / 1000)
    logger.error("Execution is about to time out, sending failure message")
    raise ExecutionTimeoutError(TIMEOUT_REASON)
