import json
import os
import sys
import tempfile
import unittest
from unittest import mock


sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))


from alarmhook.configuration import (  # noqa: E402
    Configuration,
    ConfigurationRequest,
    TextField,
    as_configuration,
    load_config,
)
from alarmhook.errors import ConfigurationError  # noqa: E402


def _write_config(td: str, cfg: object) -> str:
    path = os.path.join(td, "config.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg, f, ensure_ascii=False)
    return path


class TestConfiguration(unittest.TestCase):
    def test_configuration_is_a_read_only_copy(self) -> None:
        source = {"url": "https://example.org", "port": "8080", "on": 1}
        cfg = Configuration(source)
        source["url"] = "changed"

        self.assertEqual(cfg.get_string("url"), "https://example.org")
        self.assertEqual(cfg.get_int("port"), 8080)
        self.assertEqual(cfg.get_int("missing", 3), 3)
        self.assertTrue(cfg.get_bool("on"))
        self.assertIn("url", cfg)
        self.assertEqual(len(cfg), 3)
        with self.assertRaises(TypeError):
            cfg._source["url"] = "x"  # noqa: SLF001

        copy = cfg.source()
        copy["url"] = "x"
        self.assertEqual(cfg["url"], "https://example.org")

    def test_as_configuration(self) -> None:
        cfg = Configuration({"url": "u"})
        self.assertIs(as_configuration(cfg), cfg)
        self.assertEqual(as_configuration(None).source(), {})
        with self.assertRaises(ConfigurationError):
            as_configuration("https://example.org")  # type: ignore[arg-type]

    def test_request_check_only_enforces_required_fields(self) -> None:
        request = ConfigurationRequest()
        request.add_field(TextField(key="url", label="URL", default_hint="", description=""))
        request.add_field(TextField(key="note", label="Note", default_hint="", description="", required=False))

        request.check({"url": "x"})
        with self.assertRaises(ConfigurationError):
            request.check({"note": "only optional"})
        self.assertEqual([f.key for f in request.fields()], ["url", "note"])
        self.assertIsNone(request.get_field("missing"))


class TestLoadConfig(unittest.TestCase):
    def test_load_config_parses_http_and_callbacks(self) -> None:
        cfg = {
            "http": {"timeout_seconds": 5, "user_agent": "ops/1", "verify_ssl": False},
            "callbacks": [
                {"type": "http", "title": "ops", "configuration": {"url": "https://example.org/alerts"}},
                {"configuration": {"url": "https://example.org/b"}},
            ],
        }
        with tempfile.TemporaryDirectory() as td:
            config = load_config(_write_config(td, cfg))

        self.assertEqual(config.http.timeout_seconds, 5.0)
        self.assertEqual(config.http.user_agent, "ops/1")
        self.assertFalse(config.http.verify_ssl)
        self.assertEqual(len(config.callbacks), 2)
        self.assertEqual(config.callbacks[0].title, "ops")
        self.assertEqual(config.callbacks[1].type, "http")
        self.assertEqual(config.callbacks[1].title, "http-1")

    def test_string_booleans_are_parsed(self) -> None:
        for raw, expected in (("false", False), ("False", False), ("0", False), ("no", False), ("true", True), ("on", True)):
            with tempfile.TemporaryDirectory() as td:
                config = load_config(_write_config(td, {"http": {"verify_ssl": raw}}))
            self.assertIs(config.http.verify_ssl, expected, raw)

        with tempfile.TemporaryDirectory() as td:
            config = load_config(_write_config(td, {"http": {"verify_ssl": "maybe"}}))
        self.assertTrue(config.http.verify_ssl)

    def test_defaults_when_sections_missing(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            config = load_config(_write_config(td, {"http": {"timeout_seconds": "oops"}}))
        self.assertEqual(config.http.timeout_seconds, 20.0)
        self.assertTrue(config.http.verify_ssl)
        self.assertEqual(config.callbacks, ())

    def test_env_overrides_configuration_value(self) -> None:
        cfg = {
            "callbacks": [
                {
                    "type": "http",
                    "title": "ops",
                    "configuration": {"url": "https://placeholder.example.org"},
                    "configuration_env": {"url": "OPS_ALERT_URL"},
                }
            ]
        }
        with tempfile.TemporaryDirectory() as td:
            config = load_config(_write_config(td, cfg))

        with mock.patch.dict(os.environ, {"OPS_ALERT_URL": "https://real.example.org/hook?token=x"}):
            resolved = config.callbacks[0].resolve_configuration()
        self.assertEqual(resolved.get_string("url"), "https://real.example.org/hook?token=x")

        with mock.patch.dict(os.environ, {}, clear=True):
            resolved = config.callbacks[0].resolve_configuration()
        self.assertEqual(resolved.get_string("url"), "https://placeholder.example.org")

    def test_structural_errors_raise_value_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(ValueError):
                load_config(_write_config(td, []))
            with self.assertRaises(ValueError):
                load_config(_write_config(td, {"callbacks": {"type": "http"}}))
            with self.assertRaises(ValueError):
                load_config(_write_config(td, {"callbacks": [{"configuration": "https://x"}]}))
