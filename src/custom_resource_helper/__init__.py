"""Helpers for implementing CloudFormation custom resources on AWS Lambda.

Lifecycle logic is supplied as ``on_create``/``on_update``/``on_delete``
callables. The helper dispatches each request, guards against the execution
deadline and always answers CloudFormation exactly once.
"""

from custom_resource_helper.exceptions import (
    CustomResourceError,
    ExecutionTimeoutError,
    InvalidHandlerResultError,
    InvalidRequestTypeError,
    ResponseDeliveryError,
)
from custom_resource_helper.handler import CustomResourceHandler, custom_resource_helper
from custom_resource_helper.models import (
    HandlerResult,
    ResourceHandler,
    ResponseEnvelope,
    ResponseStatus,
)

__all__ = [
    "CustomResourceError",
    "CustomResourceHandler",
    "ExecutionTimeoutError",
    "HandlerResult",
    "InvalidHandlerResultError",
    "InvalidRequestTypeError",
    "ResourceHandler",
    "ResponseDeliveryError",
    "ResponseEnvelope",
    "ResponseStatus",
    "custom_resource_helper",
]
