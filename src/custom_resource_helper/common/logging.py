"""Logging utilities for custom resource handlers.

Provides the default log factory, which builds an AWS Lambda Powertools
Logger whose level can be controlled per resource through the ``LogLevel``
resource property.
"""

__all__ = [
    "SERVICE_NAME",
    "LOG_LEVEL_PROPERTY",
    "LOG_LEVEL_ENV_VAR",
    "DEFAULT_LOG_LEVEL",
    "LoggerLike",
    "LogFactory",
    "default_log_factory",
    "get_service_logger",
    "parse_log_level",
]

import logging
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from aibs_informatics_core.utils.os_operations import get_env_var
from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

SERVICE_NAME = "custom-resource-helper"

LOG_LEVEL_PROPERTY = "LogLevel"
"""Resource property used to set the log level of the default logger."""

LOG_LEVEL_ENV_VAR = "CUSTOM_RESOURCE_LOG_LEVEL"
"""Environment variable used when the resource does not set ``LogLevel``."""

DEFAULT_LOG_LEVEL = logging.WARNING

LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


class LoggerLike(Protocol):
    """Logging capabilities used by the custom resource helper.

    The powertools ``Logger`` and the standard library ``logging.Logger``
    both satisfy this protocol.
    """

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        ...  # pragma: no cover

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        ...  # pragma: no cover

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        ...  # pragma: no cover


LogFactory = Callable[[Any, LambdaContext], LoggerLike]


def parse_log_level(value: Union[str, int, None], default: int = DEFAULT_LOG_LEVEL) -> int:
    """Convert a log level name or number into a ``logging`` level.

    Args:
        value (Union[str, int, None]): A level name (case-insensitive, ``warn`` is
            accepted) or a numeric level.
        default (int): Level returned when value is empty or not recognized.

    Returns:
        The numeric logging level.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    name = str(value).strip().upper()
    if not name:
        return default
    if name.isdigit():
        return int(name)
    name = LOG_LEVEL_ALIASES.get(name, name)
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def get_service_logger(service: Optional[str] = None, level: Union[str, int, None] = None) -> Logger:
    """Create a powertools Logger for a service.

    Args:
        service (Optional[str]): The service name. Defaults to SERVICE_NAME.
        level (Union[str, int, None]): Log level to apply. Defaults to WARNING.

    Returns:
        A configured Logger instance.
    """
    service_logger = Logger(service=service or SERVICE_NAME)
    # Loggers sharing a service name share state, so always reapply the level.
    service_logger.setLevel(parse_log_level(level))
    return service_logger


def default_log_factory(event: Mapping[str, Any]) -> Logger:
    """Build the default logger for a custom resource event.

    The level is read from the ``LogLevel`` resource property, falling back to
    the ``CUSTOM_RESOURCE_LOG_LEVEL`` environment variable and then WARNING.

    Args:
        event (Mapping[str, Any]): The incoming CloudFormation custom resource event.

    Returns:
        A Logger with the request correlation keys appended.
    """
    properties = event.get("ResourceProperties") or {}
    level = None
    if isinstance(properties, Mapping):
        level = properties.get(LOG_LEVEL_PROPERTY)
    if level is None:
        level = get_env_var(LOG_LEVEL_ENV_VAR)

    logger = get_service_logger(level=level)
    logger.append_keys(
        stack_id=event.get("StackId"),
        request_id=event.get("RequestId"),
        logical_resource_id=event.get("LogicalResourceId"),
        request_type=event.get("RequestType"),
    )
    return logger
