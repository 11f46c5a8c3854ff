"""Shared error types for timeline resolution, identifier allocation and score loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ConfigurationError(ValueError):
    """Raised when a resolver, allocator or settings value cannot be built."""

    detail: str
    field: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error_type": "ConfigurationError",
            "detail": self.detail,
        }
        if self.field is not None:
            payload["field"] = self.field
        return payload

    def __str__(self) -> str:
        if self.field is None:
            return self.detail
        return f"{self.detail}: field={self.field}"


@dataclass
class OutOfRangeError(LookupError):
    """Raised when a tick or bar index is not covered by any signature segment."""

    kind: str
    value: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error_type": "OutOfRangeError",
            "kind": self.kind,
            "value": int(self.value),
        }

    def __str__(self) -> str:
        return f"{self.kind} out of range: {self.value}"


@dataclass
class OrderingError(ValueError):
    """Raised when allocation requests arrive with a decreasing start tick."""

    start_tick: int
    last_start_tick: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error_type": "OrderingError",
            "start_tick": int(self.start_tick),
            "last_start_tick": int(self.last_start_tick),
        }

    def __str__(self) -> str:
        return (
            f"start_tick must not be less than last called value: "
            f"start_tick={self.start_tick} last_start_tick={self.last_start_tick}"
        )


@dataclass
class PoolExhaustedError(RuntimeError):
    """Raised when more intervals are live than the identifier pool can hold."""

    tick: int
    pool_size: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error_type": "PoolExhaustedError",
            "tick": int(self.tick),
            "pool_size": int(self.pool_size),
        }

    def __str__(self) -> str:
        return f"identifier pool exhausted: tick={self.tick} pool_size={self.pool_size}"


@dataclass
class ScoreFormatError(ValueError):
    """Raised when a score book file is missing fields or holds invalid values."""

    path: str
    detail: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error_type": "ScoreFormatError",
            "path": self.path,
            "detail": self.detail,
        }

    def __str__(self) -> str:
        return f"{self.path}: {self.detail}"
