"""Delivery of custom resource responses to CloudFormation.

CloudFormation waits on a presigned, single-use callback URL for the outcome
of every custom resource request. ``send_response`` performs that one PUT and
``CustomResourceResponder`` guarantees it happens at most once per invocation.
"""

__all__ = [
    "send_response",
    "CustomResourceResponder",
]

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from aws_lambda_powertools.utilities.typing import LambdaContext

from custom_resource_helper.common.logging import LoggerLike
from custom_resource_helper.exceptions import ResponseDeliveryError
from custom_resource_helper.models import (
    CustomResourceEvent,
    HandlerResult,
    ResponseEnvelope,
    ResponseStatus,
)

SUCCESS_REASON = "OK"
INTERNAL_ERROR_REASON = "Internal Error"

RESPONSE_TIMEOUT_SECONDS = 2.5
"""Bound on the callback PUT, kept under the deadline guard's safety margin."""


def send_response(url: str, envelope: ResponseEnvelope, logger: LoggerLike) -> requests.Response:
    """PUT a response envelope to a CloudFormation callback URL.

    Presigned S3 URLs used by CloudFormation require an empty content type and
    an explicit content length. The request is attempted exactly once, and a
    non-2xx status from the endpoint counts as a failed delivery.

    Args:
        url (str): The ResponseURL of the event.
        envelope (ResponseEnvelope): The response to deliver.
        logger (LoggerLike): Logger of the current invocation.

    Raises:
        ResponseDeliveryError: If the PUT could not be completed.

    Returns:
        The HTTP response returned by the callback endpoint.
    """
    body = envelope.to_json().encode("utf-8")

    logger.debug("Response body:")
    logger.debug(body.decode("utf-8"))
    logger.debug(f"CFN response URL: {url}")

    try:
        response = requests.put(
            url,
            data=body,
            headers={"content-type": "", "content-length": str(len(body))},
            timeout=RESPONSE_TIMEOUT_SECONDS,
        )
        logger.info(f"CloudFormation returned status code: {response.status_code}")
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("send_response(...) failed executing requests.put:")
        logger.error(e)
        raise ResponseDeliveryError(f"Failed to deliver response to {url}: {e}") from e

    return response


@dataclass
class CustomResourceResponder:
    """Sends the single response of one custom resource invocation.

    The first call to ``send`` closes the responder, even if the delivery
    fails. Later calls are logged and dropped, so a request is never answered
    twice.

    Attributes:
        event: The event being answered.
        context: The invocation context.
        logger: Logger of the current invocation.
    """

    event: CustomResourceEvent
    context: LambdaContext
    logger: LoggerLike
    _sent: bool = field(default=False, init=False, repr=False)

    @property
    def sent(self) -> bool:
        return self._sent

    def send(
        self,
        status: ResponseStatus,
        reason: Optional[str] = None,
        physical_resource_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[requests.Response]:
        if self._sent:
            self.logger.error(
                f"A response was already sent for request {self.event.request_id}, "
                f"dropping {ResponseStatus(status).value} response"
            )
            return None
        self._sent = True
        envelope = ResponseEnvelope.from_event(
            self.event,
            self.context,
            status=status,
            reason=reason,
            physical_resource_id=physical_resource_id,
            data=data,
        )
        return send_response(self.event.response_url, envelope, self.logger)

    def success(self, result: HandlerResult) -> Optional[requests.Response]:
        return self.send(
            ResponseStatus.SUCCESS,
            reason=SUCCESS_REASON,
            physical_resource_id=result.physical_resource_id,
            data=result.data,
        )

    def failure(self, error: BaseException) -> Optional[requests.Response]:
        return self.send(ResponseStatus.FAILED, reason=str(error) or INTERNAL_ERROR_REASON)
