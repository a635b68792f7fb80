"""Tests for :mod:`amexecutor.handlers` and the handler models."""

import pytest
from pydantic import ValidationError

from amexecutor.exceptions import ConfigurationError, HandlerMissingError
from amexecutor.handlers import HandlerResolver, load_handlers_config
from amexecutor.models.alert import Alert
from amexecutor.models.handlers import HandlersConfig, HandlerSpec
from payloads import make_alert


def _resolver(**handlers) -> HandlerResolver:
    return HandlerResolver(HandlersConfig(handlers=handlers))


def _alert(status="firing") -> Alert:
    return Alert.model_validate(make_alert(status=status))


class TestHandlerSpec:
    """Verify status filter defaults and matching."""

    def test_empty_status_means_firing(self):
        spec = HandlerSpec(command="true")
        assert spec.status_filter == "firing"
        assert spec.matches("firing")
        assert not spec.matches("resolved")

    def test_wildcard(self):
        spec = HandlerSpec(command="true", status="*")
        assert spec.matches("firing")
        assert spec.matches("resolved")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            HandlerSpec(command="true", status="pending")

    def test_frozen(self):
        spec = HandlerSpec(command="true")
        with pytest.raises(ValidationError):
            spec.command = "false"


class TestHandlerResolver:
    """Verify lookup and status filtering."""

    def test_found(self):
        spec = HandlerSpec(command="echo hi")
        assert _resolver(page=spec).resolve("page", _alert()) is spec

    def test_missing(self):
        with pytest.raises(HandlerMissingError) as exc_info:
            _resolver().resolve("page", _alert())
        assert exc_info.value.handler == "page"
        assert "Handler page is not defined" in str(exc_info.value)

    def test_exact_match_only(self):
        with pytest.raises(HandlerMissingError):
            _resolver(page=HandlerSpec(command="true")).resolve("Page", _alert())

    def test_status_mismatch_skips(self):
        resolver = _resolver(cleanup=HandlerSpec(command="true", status="resolved"))
        assert resolver.resolve("cleanup", _alert("firing")) is None

    def test_status_match(self):
        resolver = _resolver(cleanup=HandlerSpec(command="true", status="resolved"))
        assert resolver.resolve("cleanup", _alert("resolved")) is not None

    def test_default_filter_skips_resolved(self):
        resolver = _resolver(page=HandlerSpec(command="true"))
        assert resolver.resolve("page", _alert("resolved")) is None


class TestLoadHandlersConfig:
    """Verify YAML configuration loading."""

    def test_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "handlers:\n"
            "  page:\n"
            "    command: /bin/page {{ labels.alertname }}\n"
            "  all:\n"
            "    command: logger alert\n"
            "    status: '*'\n",
            encoding="utf-8",
        )
        config = load_handlers_config(path)
        assert set(config.handlers) == {"page", "all"}
        assert config.handlers["page"].status_filter == "firing"
        assert config.handlers["all"].status == "*"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_handlers_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_handlers_config(path).handlers == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("handlers: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_handlers_config(path)

    def test_invalid_schema(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("handlers:\n  page:\n    status: firing\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_handlers_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_handlers_config(path)
