import json
from test.base import BaseTest
from typing import Any, Dict, List
from unittest import mock

import requests
from aws_lambda_powertools.utilities.typing import LambdaContext
from aws_lambda_powertools.utilities.typing.lambda_client_context import LambdaClientContext
from aws_lambda_powertools.utilities.typing.lambda_cognito_identity import LambdaCognitoIdentity

RESPONSE_URL = "https://cloudformation-custom-resource-response-uswest2.s3.amazonaws.com/presigned"
STACK_ID = "arn:aws:cloudformation:us-west-2:123456789012:stack/my-stack/guid"
REQUEST_ID = "unique-request-id"
LOGICAL_RESOURCE_ID = "MyCustomResource"


class MockLambdaContext(LambdaContext):
    def __init__(self, function_name: str, remaining_time_in_millis: int = 60_000):
        self._function_name = function_name
        self._function_version = "1.0"
        self._invoked_function_arn = (
            f"arn:aws:lambda:us-west-2:123456789012:function:{function_name}"
        )
        self._memory_limit_in_mb = 128
        self._aws_request_id = "12345678-1234-1234-1234-123456789012"
        self._log_group_name = f"/aws/lambda/{function_name}"
        self._log_stream_name = "2024/01/01/[$LATEST]abcdef"
        self._identity = LambdaCognitoIdentity()
        self._client_context = LambdaClientContext()
        self._remaining_time_in_millis = remaining_time_in_millis

    def get_remaining_time_in_millis(self) -> int:  # type: ignore[override]
        return self._remaining_time_in_millis


def build_response(status_code: int) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = RESPONSE_URL
    return response


def build_event(request_type: str = "Create", **overrides: Any) -> Dict[str, Any]:
    event: Dict[str, Any] = {
        "RequestType": request_type,
        "ServiceToken": "arn:aws:lambda:us-west-2:123456789012:function:provider",
        "ResponseURL": RESPONSE_URL,
        "StackId": STACK_ID,
        "RequestId": REQUEST_ID,
        "LogicalResourceId": LOGICAL_RESOURCE_ID,
        "ResourceType": "Custom::Thing",
        "ResourceProperties": {"ServiceToken": "token", "Name": "thing"},
    }
    if request_type == "Update":
        event["PhysicalResourceId"] = "thing-1"
        event["OldResourceProperties"] = {"ServiceToken": "token", "Name": "old-thing"}
    elif request_type == "Delete":
        event["PhysicalResourceId"] = "thing-1"
    event.update(overrides)
    return event


class CustomResourceTestCase(BaseTest):
    def setUp(self) -> None:
        super().setUp()
        self.mock_requests_put = self.create_patch(
            "custom_resource_helper.response.requests.put"
        )
        self.mock_requests_put.return_value = build_response(200)

    def get_context(self, remaining_time_in_millis: int = 60_000) -> LambdaContext:
        return MockLambdaContext(self.__class__.__name__, remaining_time_in_millis)

    @property
    def sent_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(c.kwargs["data"]) for c in self.mock_requests_put.call_args_list]

    def assertSentOnce(self) -> Dict[str, Any]:
        self.mock_requests_put.assert_called_once()
        self.assertEqual(self.mock_requests_put.call_args.args[0], RESPONSE_URL)
        return self.sent_bodies[0]
