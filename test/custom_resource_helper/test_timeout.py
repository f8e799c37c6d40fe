import asyncio
from test.base import BaseTest
from test.custom_resource_helper.base import MockLambdaContext
from unittest import mock

from custom_resource_helper.exceptions import ExecutionTimeoutError
from custom_resource_helper.timeout import SAFETY_MARGIN_MS, deadline_guard


class DeadlineGuardTests(BaseTest):
    def setUp(self) -> None:
        super().setUp()
        self.logger = mock.MagicMock()

    def test__safety_margin__is_three_seconds(self):
        self.assertEqual(SAFETY_MARGIN_MS, 3000)

    def test__fires_immediately_when_less_than_margin_remains(self):
        context = MockLambdaContext("test", remaining_time_in_millis=1000)

        with self.assertRaises(ExecutionTimeoutError) as ctx:
            asyncio.run(asyncio.wait_for(deadline_guard(context, self.logger), timeout=1))

        self.assertEqual(str(ctx.exception), "Execution timed out")
        self.logger.error.assert_called_once_with(
            "Execution is about to time out, sending failure message"
        )

    def test__fires_after_remaining_time_minus_margin(self):
        context = MockLambdaContext("test", remaining_time_in_millis=SAFETY_MARGIN_MS + 50)

        with self.assertRaises(ExecutionTimeoutError):
            asyncio.run(asyncio.wait_for(deadline_guard(context, self.logger), timeout=2))

    def test__custom_safety_margin(self):
        context = MockLambdaContext("test", remaining_time_in_millis=500)

        with self.assertRaises(ExecutionTimeoutError):
            asyncio.run(
                asyncio.wait_for(
                    deadline_guard(context, self.logger, safety_margin_ms=450), timeout=2
                )
            )

    def test__does_not_fire_before_deadline(self):
        context = MockLambdaContext("test", remaining_time_in_millis=60_000)

        async def run_briefly():
            task = asyncio.ensure_future(deadline_guard(context, self.logger))
            await asyncio.sleep(0.05)
            self.assertFalse(task.done())
            task.cancel()

        asyncio.run(run_briefly())
        self.logger.error.assert_not_called()
