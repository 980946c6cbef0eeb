"""Tests for startup config validation helpers."""

import logging
import os
import unittest
from unittest import mock

from core.startup_config import (
    LOG_LEVEL_ENV,
    STRICT_CONFIG_ENV,
    ConfigValidationError,
    get_section,
    resolve_log_level,
    resolve_strict_config_validation,
)


class TestStrictMode(unittest.TestCase):
    def test_default_when_unset(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertFalse(resolve_strict_config_validation())
            self.assertTrue(resolve_strict_config_validation(default=True))

    def test_truthy_values_enable_strict(self) -> None:
        for raw in ("1", "true", "YES", " on "):
            with mock.patch.dict(os.environ, {STRICT_CONFIG_ENV: raw}, clear=True):
                self.assertTrue(resolve_strict_config_validation(), raw)

    def test_other_values_disable_strict(self) -> None:
        with mock.patch.dict(os.environ, {STRICT_CONFIG_ENV: "nope"}, clear=True):
            self.assertFalse(resolve_strict_config_validation(default=True))


class TestLogLevel(unittest.TestCase):
    def test_unset_returns_default(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_log_level(default=logging.WARNING), logging.WARNING)

    def test_name_and_number_are_accepted(self) -> None:
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "debug"}, clear=True):
            self.assertEqual(resolve_log_level(), logging.DEBUG)
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "30"}, clear=True):
            self.assertEqual(resolve_log_level(), 30)

    def test_unknown_level_non_strict_falls_back(self) -> None:
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "chatty"}, clear=True):
            self.assertEqual(resolve_log_level(default=logging.INFO), logging.INFO)

    def test_unknown_level_strict_raises(self) -> None:
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "chatty"}, clear=True):
            with self.assertRaises(ConfigValidationError):
                resolve_log_level(strict=True)


class TestGetSection(unittest.TestCase):
    def test_missing_section_is_empty(self) -> None:
        self.assertEqual(get_section({}, "filter"), {})

    def test_mapping_section_is_returned(self) -> None:
        self.assertEqual(get_section({"filter": {"a": 1}}, "filter"), {"a": 1})

    def test_wrong_type_non_strict_is_empty(self) -> None:
        self.assertEqual(get_section({"filter": [1, 2]}, "filter"), {})

    def test_wrong_type_strict_raises(self) -> None:
        with self.assertRaises(ConfigValidationError):
            get_section({"filter": "x"}, "filter", strict=True)


if __name__ == "__main__":
    unittest.main()
