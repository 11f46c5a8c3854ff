import json
import logging

import pytest

from sscexport.config import Settings
from sscexport.logging_utils import (
    JsonFormatter,
    LoggingContextFilter,
    build_formatter,
    chart_log_context,
    configure_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test_path.py",
        lineno=12,
        msg="hello",
        args=(),
        exc_info=None,
        func="test_func",
    )
    record.__dict__.update(extra)
    return record


def test_context_applies_only_inside_block():
    inside = _record()
    outside = _record()
    with chart_log_context("song", "charts/song.yaml"):
        LoggingContextFilter().filter(inside)
    LoggingContextFilter().filter(outside)
    assert (inside.chart_id, inside.source) == ("song", "charts/song.yaml")
    assert (outside.chart_id, outside.source) == ("-", "-")


def test_text_format_includes_chart_context():
    record = _record()
    with chart_log_context("song", "song.yaml"):
        LoggingContextFilter().filter(record)
    formatted = build_formatter(json_logs=False).format(record)
    assert "chart_id=song" in formatted
    assert "source=song.yaml" in formatted


def test_json_format_keeps_error_payload():
    formatter = build_formatter(json_logs=True)
    assert isinstance(formatter, JsonFormatter)
    record = _record(error={"error_type": "PoolExhaustedError", "tick": 10, "pool_size": 2})
    LoggingContextFilter().filter(record)
    payload = json.loads(formatter.format(record))
    assert payload["chart_id"] == "-"
    assert payload["message"] == "hello"
    assert payload["error"]["pool_size"] == 2


def test_dev_config_logs_info_and_debug_flag_lowers_level():
    configure_logging(Settings(app_env="dev"))
    assert logging.getLogger().level == logging.INFO
    configure_logging(Settings(app_env="dev"), debug=True)
    assert logging.getLogger().level == logging.DEBUG


def test_log_level_setting_overrides_config():
    configure_logging(Settings(app_env="prod", log_level="warning"))
    assert logging.getLogger().level == logging.WARNING


def test_missing_config_falls_back_to_stderr_handler(tmp_path):
    configure_logging(Settings(log_config=tmp_path / "absent.json", log_json=True))
    root = logging.getLogger()
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert isinstance(handler.formatter, JsonFormatter)
    assert any(isinstance(f, LoggingContextFilter) for f in handler.filters)
