"""Data models for CloudFormation custom resource handling.

Defines the resource handler set supplied by library consumers, the result
returned by Create/Update handlers and the response envelope sent back to
CloudFormation.
"""

__all__ = [
    "NONE_PHYSICAL_RESOURCE_ID",
    "CustomResourceEvent",
    "OnCreateHandler",
    "OnUpdateHandler",
    "OnDeleteHandler",
    "ResourceHandler",
    "ResourceHandlerFactory",
    "HandlerResult",
    "ResponseStatus",
    "ResponseEnvelope",
]

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import marshmallow as mm
from aibs_informatics_core.models.base import DictField, SchemaModel, StringField, custom_field
from aibs_informatics_core.utils.json import JSON
from aws_lambda_powertools.utilities.data_classes import CloudFormationCustomResourceEvent
from aws_lambda_powertools.utilities.typing import LambdaContext

from custom_resource_helper.common.logging import LoggerLike

NONE_PHYSICAL_RESOURCE_ID = "None"
"""Physical resource id reported when no handler produced one."""

CustomResourceEvent = CloudFormationCustomResourceEvent


OnCreateHandler = Callable[
    [CustomResourceEvent, LambdaContext, LoggerLike],
    Union["HandlerResult", JSON, Awaitable[Union["HandlerResult", JSON]]],
]
OnUpdateHandler = OnCreateHandler
OnDeleteHandler = Callable[[CustomResourceEvent, LambdaContext, LoggerLike], Any]


@dataclass
class ResourceHandler:
    """The lifecycle callables of a custom resource.

    Every callable is optional. Each one is invoked as
    ``fn(event, context, logger)`` and may be a coroutine function or a plain
    function. A request whose callable is missing is reported as a success.

    Attributes:
        on_create: Called for Create requests. Returns a HandlerResult.
        on_update: Called for Update requests. Returns a HandlerResult. Returning
            a different physical resource id makes CloudFormation delete the old one.
        on_delete: Called for Delete requests. Its return value is ignored.
    """

    on_create: Optional[OnCreateHandler] = None
    on_update: Optional[OnUpdateHandler] = None
    on_delete: Optional[OnDeleteHandler] = None


ResourceHandlerFactory = Callable[..., Union[ResourceHandler, Awaitable[ResourceHandler]]]


PHYSICAL_RESOURCE_ID_ALIASES = ["physical_resource_id", "PhysicalResourceId", "physicalResourceId"]
RESPONSE_DATA_ALIASES = ["response_data", "Data", "responseData"]


@dataclass
class HandlerResult(SchemaModel):
    """Result of a Create or Update handler.

    Attributes:
        physical_resource_id: Identifier of the real-world resource.
        response_data: Values exposed to the stack through ``Fn::GetAtt``.
    """

    physical_resource_id: str = custom_field(mm_field=StringField())
    response_data: Optional[Dict[str, Any]] = custom_field(
        mm_field=DictField(allow_none=True), default=None
    )

    @property
    def data(self) -> Dict[str, Any]:
        return self.response_data or {}

    @classmethod
    @mm.pre_load
    def _parse_fields(cls, data: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        parsed: Dict[str, Any] = {}
        for target, aliases in (
            ("physical_resource_id", PHYSICAL_RESOURCE_ID_ALIASES),
            ("response_data", RESPONSE_DATA_ALIASES),
        ):
            for alias in aliases:
                if alias in data:
                    parsed[target] = data[alias]
                    break
        return parsed


class ResponseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass
class ResponseEnvelope:
    """The response body sent to the CloudFormation callback URL.

    Field names on the wire are fixed by CloudFormation, see ``to_dict``.
    """

    status: ResponseStatus
    reason: str
    physical_resource_id: str
    stack_id: str
    request_id: str
    logical_resource_id: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_event(
        cls,
        event: CustomResourceEvent,
        context: LambdaContext,
        status: ResponseStatus,
        reason: Optional[str] = None,
        physical_resource_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> "ResponseEnvelope":
        """Build the envelope answering a custom resource event.

        Args:
            event (CustomResourceEvent): The event being answered.
            context (LambdaContext): The invocation context, used for the default reason.
            status (ResponseStatus): SUCCESS or FAILED.
            reason (Optional[str]): Human readable reason. Defaults to a pointer
                at the invocation's log stream.
            physical_resource_id (Optional[str]): Defaults to "None".
            data (Optional[Dict[str, Any]]): Defaults to an empty dict.

        Returns:
            The response envelope.
        """
        return cls(
            status=ResponseStatus(status),
            reason=reason
            or f"See the details in CloudWatch Log Stream: {context.log_stream_name}",
            physical_resource_id=physical_resource_id or NONE_PHYSICAL_RESOURCE_ID,
            stack_id=event.stack_id,
            request_id=event.request_id,
            logical_resource_id=event.logical_resource_id,
            data=data or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Status": self.status.value,
            "Reason": self.reason,
            "PhysicalResourceId": self.physical_resource_id,
            "StackId": self.stack_id,
            "RequestId": self.request_id,
            "LogicalResourceId": self.logical_resource_id,
            "Data": self.data,
        }

    def to_json(self) -> str:
        return json.dumps(
            self.to_dict(), separators=(",", ":"), ensure_ascii=False, default=str
        )
