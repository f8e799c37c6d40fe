import logging
from test.base import BaseTest
from test.custom_resource_helper.base import build_event

from custom_resource_helper.common.logging import (
    LOG_LEVEL_ENV_VAR,
    SERVICE_NAME,
    default_log_factory,
    parse_log_level,
)


class ParseLogLevelTests(BaseTest):
    def test__names_are_case_insensitive(self):
        self.assertEqual(parse_log_level("debug"), logging.DEBUG)
        self.assertEqual(parse_log_level("Info"), logging.INFO)
        self.assertEqual(parse_log_level("ERROR"), logging.ERROR)

    def test__aliases(self):
        self.assertEqual(parse_log_level("warn"), logging.WARNING)
        self.assertEqual(parse_log_level("fatal"), logging.CRITICAL)

    def test__numbers(self):
        self.assertEqual(parse_log_level(10), logging.DEBUG)
        self.assertEqual(parse_log_level("20"), logging.INFO)

    def test__invalid_values_use_default(self):
        self.assertEqual(parse_log_level(None), logging.WARNING)
        self.assertEqual(parse_log_level(""), logging.WARNING)
        self.assertEqual(parse_log_level("verbose"), logging.WARNING)
        self.assertEqual(parse_log_level("verbose", default=logging.INFO), logging.INFO)


class DefaultLogFactoryTests(BaseTest):
    def setUp(self) -> None:
        super().setUp()
        self.set_env_vars((LOG_LEVEL_ENV_VAR, ""))

    def test__defaults_to_warning(self):
        logger = default_log_factory(build_event("Create"))
        self.assertEqual(logger.log_level, logging.WARNING)

    def test__log_level_resource_property(self):
        event = build_event("Create", ResourceProperties={"LogLevel": "debug"})
        logger = default_log_factory(event)
        self.assertEqual(logger.log_level, logging.DEBUG)

    def test__log_level_environment_variable(self):
        self.set_env_vars((LOG_LEVEL_ENV_VAR, "info"))
        logger = default_log_factory(build_event("Delete"))
        self.assertEqual(logger.log_level, logging.INFO)

    def test__resource_property_overrides_environment_variable(self):
        self.set_env_vars((LOG_LEVEL_ENV_VAR, "info"))
        event = build_event("Update", ResourceProperties={"LogLevel": "error"})
        self.assertEqual(default_log_factory(event).log_level, logging.ERROR)

    def test__level_is_reapplied_for_each_event(self):
        default_log_factory(build_event("Create", ResourceProperties={"LogLevel": "debug"}))
        logger = default_log_factory(build_event("Create"))
        self.assertEqual(logger.log_level, logging.WARNING)

    def test__uses_service_name(self):
        logger = default_log_factory(build_event("Create"))
        self.assertEqual(logger.service, SERVICE_NAME)
