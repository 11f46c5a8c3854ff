"""Tick to bar/beat resolution under piecewise-constant time signatures."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from sscexport.errors import ConfigurationError, OutOfRangeError


@dataclass(frozen=True)
class TimeSignatureChange:
    tick: int
    numerator: int
    denominator: int

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


@dataclass(frozen=True)
class TimeSignatureSegment:
    start_tick: int
    start_bar_index: int
    signature: TimeSignatureChange


@dataclass(frozen=True)
class BarPosition:
    bar_index: int
    tick_offset: int
    signature: TimeSignatureChange


def reduce_fraction(numerator: int, denominator: int) -> Tuple[int, int]:
    """Reduce ``numerator / denominator`` to lowest terms.

    Uses the iterative Euclidean algorithm with ``gcd(a, 0) == a``; a zero
    numerator therefore reduces to ``(0, 1)``.
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive: {denominator}")
    if numerator < 0:
        raise ValueError(f"numerator must not be negative: {numerator}")
    a, b = denominator, numerator
    while b:
        a, b = b, a % b
    return numerator // a, denominator // a


class TimelinePositionResolver:
    """Maps absolute ticks to bar positions.

    Built once from the full set of time-signature changes and read-only
    afterwards. A change that does not land on a bar boundary takes effect at
    the next boundary at or after its tick, so bars are never split. Changes
    that resolve to the same start tick replace each other in tick order.
    """

    def __init__(self, ticks_per_beat: int, segments: Sequence[TimeSignatureSegment]) -> None:
        self._ticks_per_beat = ticks_per_beat
        self._base_bar_ticks = ticks_per_beat * 4
        self._segments = tuple(segments)
        self._start_ticks = [segment.start_tick for segment in self._segments]
        self._start_bars = [segment.start_bar_index for segment in self._segments]

    @classmethod
    def build(
        cls,
        ticks_per_beat: int,
        changes: Iterable[TimeSignatureChange],
    ) -> "TimelinePositionResolver":
        if ticks_per_beat <= 0:
            raise ConfigurationError("ticks_per_beat must be positive", field="ticks_per_beat")
        base_bar_ticks = ticks_per_beat * 4
        ordered = sorted(changes, key=lambda change: change.tick)
        if not ordered:
            raise ConfigurationError("at least one time signature is required", field="time_signatures")
        for change in ordered:
            _validate_change(change, base_bar_ticks)

        by_start: dict[int, TimeSignatureSegment] = {}
        pos = 0
        bar_index = 0
        for i, change in enumerate(ordered):
            by_start[pos] = TimeSignatureSegment(
                start_tick=pos,
                start_bar_index=bar_index,
                signature=change,
            )
            if i < len(ordered) - 1:
                bar_length = base_bar_ticks * change.numerator // change.denominator
                duration = ordered[i + 1].tick - pos
                # Round up to the next whole bar; never step backwards.
                bars = max(0, -(-duration // bar_length))
                pos += bars * bar_length
                bar_index += bars

        segments = [by_start[start] for start in sorted(by_start)]
        return cls(ticks_per_beat, segments)

    @property
    def ticks_per_beat(self) -> int:
        return self._ticks_per_beat

    @property
    def base_bar_ticks(self) -> int:
        """Ticks in a whole note (four beats)."""
        return self._base_bar_ticks

    @property
    def segments(self) -> Tuple[TimeSignatureSegment, ...]:
        """Segments in ascending start tick order."""
        return self._segments

    def bar_length(self, signature: TimeSignatureChange) -> int:
        return self._base_bar_ticks * signature.numerator // signature.denominator

    def resolve(self, tick: int) -> BarPosition:
        if tick < 0:
            raise OutOfRangeError("tick", tick)
        index = bisect_right(self._start_ticks, tick) - 1
        if index < 0:
            raise OutOfRangeError("tick", tick)
        segment = self._segments[index]
        bar_length = self.bar_length(segment.signature)
        tick_offset = tick - segment.start_tick
        bar_offset = tick_offset // bar_length
        return BarPosition(
            bar_index=segment.start_bar_index + bar_offset,
            tick_offset=tick_offset - bar_offset * bar_length,
            signature=segment.signature,
        )

    def signature_at_bar(self, bar_index: int) -> TimeSignatureChange:
        if bar_index < 0:
            raise OutOfRangeError("bar_index", bar_index)
        index = bisect_right(self._start_bars, bar_index) - 1
        if index < 0:
            raise OutOfRangeError("bar_index", bar_index)
        return self._segments[index].signature

    def format_position(self, tick: int) -> str:
        """Render ``tick`` as ``*{bar}/{numerator}/{denominator}``.

        Bars are 1-based and the beat fraction is measured against a whole
        note, reduced to lowest terms.
        """
        position = self.resolve(tick)
        numerator, denominator = reduce_fraction(position.tick_offset, self._base_bar_ticks)
        return f"*{position.bar_index + 1}/{numerator}/{denominator}"


def _validate_change(change: TimeSignatureChange, base_bar_ticks: int) -> None:
    if change.tick < 0:
        raise ConfigurationError(f"time signature tick must not be negative: {change.tick}", field="tick")
    if change.numerator <= 0 or change.denominator <= 0:
        raise ConfigurationError(f"invalid time signature: {change}", field="time_signatures")
    if base_bar_ticks * change.numerator // change.denominator <= 0:
        raise ConfigurationError(f"time signature {change} yields an empty bar", field="time_signatures")
