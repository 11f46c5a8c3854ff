"""Logging setup for chart export runs.

Every record emitted while a chart is being exported carries the chart id
and its source file, taken from ``chart_log_context``.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from sscexport.config import Settings

TEXT_LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s chart_id=%(chart_id)s source=%(source)s %(message)s"
)

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

_chart_id = contextvars.ContextVar("log_chart_id", default="-")
_source = contextvars.ContextVar("log_source", default="-")


@contextmanager
def chart_log_context(chart_id: str, source: str) -> Iterator[None]:
    """Tag log records with the chart being exported for the duration of the block."""
    chart_token = _chart_id.set(chart_id)
    source_token = _source.set(source)
    try:
        yield
    finally:
        _source.reset(source_token)
        _chart_id.reset(chart_token)


class LoggingContextFilter(logging.Filter):
    """Inject the current chart id and source into each record."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.chart_id = _chart_id.get()
        record.source = _source.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; export error payloads are kept as objects."""
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "chart_id": getattr(record, "chart_id", "-"),
            "source": getattr(record, "source", "-"),
        }
        error = getattr(record, "error", None)
        if error is not None:
            payload["error"] = error
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return JsonFormatter()
    return logging.Formatter(TEXT_LOG_FORMAT)


def configure_logging(settings: Settings, *, debug: bool = False) -> None:
    """Configure root logging for an export run.

    Uses ``config/logging.prod.json`` or ``config/logging.dev.json`` depending on
    ``settings.app_env`` (or ``settings.log_config`` when given) and falls back
    to a single stderr handler when the file is missing.
    """
    config_name = "logging.prod.json" if settings.is_production else "logging.dev.json"
    config_path = settings.log_config or CONFIG_DIR / config_name
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            config = json.load(handle)
        if settings.log_json and "json" in config.get("formatters", {}):
            for handler in config.get("handlers", {}).values():
                handler["formatter"] = "json"
        logging.config.dictConfig(config)
    else:
        handler = logging.StreamHandler()
        handler.addFilter(LoggingContextFilter())
        handler.setFormatter(build_formatter(settings.log_json))
        logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif settings.log_level:
        logging.getLogger().setLevel(settings.log_level.upper())
