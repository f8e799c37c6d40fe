"""Exceptions raised while handling CloudFormation custom resource requests.

Errors raised by user-supplied resource handlers are never wrapped. They are
converted into a FAILED response by the orchestrator, using the error message
as the response reason.
"""

__all__ = [
    "CustomResourceError",
    "InvalidRequestTypeError",
    "InvalidHandlerResultError",
    "ExecutionTimeoutError",
    "ResponseDeliveryError",
]

from aibs_informatics_core.exceptions import ApplicationException


class CustomResourceError(ApplicationException):
    """Base class for errors raised by the custom resource helper."""


class InvalidRequestTypeError(CustomResourceError, ValueError):
    """The event's RequestType is not one of Create, Update or Delete."""


class InvalidHandlerResultError(CustomResourceError, ValueError):
    """A Create/Update handler returned something that is not a HandlerResult."""


class ExecutionTimeoutError(CustomResourceError, TimeoutError):
    """The invocation is about to reach the host's execution deadline."""


class ResponseDeliveryError(CustomResourceError):
    """The response could not be delivered to the CloudFormation callback URL.

    This error is never converted into a CloudFormation response, since
    delivering that response is exactly what failed.
    """
