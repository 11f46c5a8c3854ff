from __future__ import annotations

"""Exporter settings loader from environment variables."""

from dataclasses import dataclass, replace
from pathlib import Path
import codecs
import os

from sscexport.errors import ConfigurationError


NEWLINES = {"crlf": "\r\n", "lf": "\n"}


def _env_int(name: str, default: int) -> int:
    """Read an int env var with a default."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", field=name) from exc


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.lower() in {"1", "true", "yes"}


def _newline(name: str) -> str:
    key = name.strip().lower()
    if key not in NEWLINES:
        raise ConfigurationError(f"newline must be one of {sorted(NEWLINES)}, got {name!r}", field="newline")
    return NEWLINES[key]


@dataclass(frozen=True)
class Settings:
    """Configuration values for chart export and its logging."""
    encoding: str = "shift_jis"
    newline: str = "\r\n"
    lane_pool_size: int = 30
    output_resolution: int = 480
    default_ticks_per_beat: int = 480
    app_env: str = "dev"
    log_json: bool = False
    log_level: str | None = None
    log_config: Path | None = None

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise ConfigurationError(f"unknown encoding: {self.encoding}", field="encoding") from exc
        if self.newline not in NEWLINES.values():
            raise ConfigurationError(f"unsupported newline: {self.newline!r}", field="newline")
        if self.lane_pool_size <= 0:
            raise ConfigurationError("lane_pool_size must be positive", field="lane_pool_size")
        if self.output_resolution <= 0:
            raise ConfigurationError("output_resolution must be positive", field="output_resolution")
        if self.default_ticks_per_beat <= 0:
            raise ConfigurationError("default_ticks_per_beat must be positive", field="default_ticks_per_beat")

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"prod", "production"}

    @classmethod
    def from_env(cls) -> "Settings":
        """Construct settings from environment variables."""
        log_config = os.getenv("LOG_CONFIG")
        return cls(
            encoding=os.getenv("SSC_ENCODING", "shift_jis").strip(),
            newline=_newline(os.getenv("SSC_NEWLINE", "crlf")),
            lane_pool_size=_env_int("SSC_LANE_POOL_SIZE", 30),
            output_resolution=_env_int("SSC_OUTPUT_RESOLUTION", 480),
            default_ticks_per_beat=_env_int("SSC_TICKS_PER_BEAT", 480),
            app_env=os.getenv("APP_ENV") or os.getenv("ENV") or "dev",
            log_json=os.getenv("LOG_FORMAT", "").lower() == "json" or _env_bool("LOG_JSON", False),
            log_level=os.getenv("SSC_LOG_LEVEL") or None,
            log_config=Path(log_config) if log_config else None,
        )

    def with_overrides(
        self,
        *,
        encoding: str | None = None,
        newline: str | None = None,
        lane_pool_size: int | None = None,
    ) -> "Settings":
        """Return a copy with the given command-line overrides applied."""
        changes = {}
        if encoding is not None:
            changes["encoding"] = encoding
        if newline is not None:
            changes["newline"] = _newline(newline)
        if lane_pool_size is not None:
            changes["lane_pool_size"] = lane_pool_size
        return replace(self, **changes)
