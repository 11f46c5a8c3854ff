"""
Shooting Simulation Chart (.ssc) rendering for score books.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from sscexport.config import Settings
from sscexport.score.model import (
    FieldPoint,
    FieldSide,
    LaneNote,
    ScoreBook,
    SurfaceLane,
)
from sscexport.timeline import IdentifierAllocator, TimelinePositionResolver

logger = logging.getLogger(__name__)

ORIGIN_TIME = "*0/0/4"
FIN_LINE = "+0/4,fin"


@dataclass(frozen=True)
class ChartLine:
    tick: int
    text: str


def format_number(value: float) -> str:
    """Format a numeric field without a trailing ``.0`` on whole values."""
    return f"{value:.15g}"


class _ChartBuilder:
    """Collects chart lines for one score book."""

    def __init__(self, book: ScoreBook, settings: Settings) -> None:
        self.book = book
        self.score = book.score
        self.settings = settings
        self.resolver = TimelinePositionResolver.build(
            self.score.ticks_per_beat,
            self.score.events.time_signature_changes,
        )
        self.lines: List[ChartLine] = []

    def time(self, tick: int) -> str:
        return self.resolver.format_position(tick)

    def add(self, tick: int, *fields: object) -> None:
        self.lines.append(ChartLine(tick, ",".join([self.time(tick), *map(str, fields)])))

    def offset(self, lane_offset: int) -> int:
        # Truncate toward zero so negative offsets mirror positive ones.
        scaled = self.settings.output_resolution * lane_offset
        quotient = abs(scaled) // self.score.half_horizontal_resolution
        return quotient if scaled >= 0 else -quotient

    def build(self) -> List[ChartLine]:
        self._add_bpm_changes()
        self._add_time_signatures()
        self._add_high_speeds()
        self._add_field_steps()
        self._add_field_side(self.score.field.left, "L")
        self._add_field_side(self.score.field.right, "R")
        self._add_surface_lanes()
        for flick in self.score.flicks:
            kind = "exflick" if flick.is_critical else "flick"
            self.add(flick.position.tick, kind, flick.direction.value, self.offset(flick.position.lane_offset))
        for bell in self.score.bells:
            self.add(bell.position.tick, "heal", self.offset(bell.position.lane_offset))
        for bullet in self.score.bullets:
            self.add(bullet.position.tick, "shot", self.offset(bullet.position.lane_offset), 1, 1)
        return self.lines

    def _add_bpm_changes(self) -> None:
        changes = sorted(self.score.events.bpm_changes, key=lambda change: change.tick)
        for index, change in enumerate(changes):
            if index == 0 and change.tick == 0:
                self.lines.append(ChartLine(0, f"{ORIGIN_TIME},bpm,{format_number(change.bpm)}"))
            else:
                self.add(change.tick, "bpm", format_number(change.bpm))

    def _add_time_signatures(self) -> None:
        changes = sorted(self.score.events.time_signature_changes, key=lambda change: change.tick)
        for index, change in enumerate(changes):
            if index == 0 and change.tick == 0:
                self.lines.append(ChartLine(0, f"{ORIGIN_TIME},beat,{change}"))
            else:
                self.add(change.tick, "beat", change)

    def _add_high_speeds(self) -> None:
        for change in sorted(self.score.events.high_speed_changes, key=lambda change: change.tick):
            self.add(change.tick, "hispeed", format_number(change.speed_ratio))

    def _add_field_steps(self) -> None:
        left = self.score.field.left.wall_points
        right = self.score.field.right.wall_points
        ticks = np.unique(np.array([point.tick for point in [*left, *right]], dtype=np.int64))
        left_offsets = self._interpolate_wall(left, ticks)
        right_offsets = self._interpolate_wall(right, ticks)
        for tick, left_x, right_x in zip(ticks.tolist(), left_offsets, right_offsets):
            self.add(tick, "fieldset", left_x, right_x, "", "")

    def _interpolate_wall(self, points: Sequence[FieldPoint], ticks: np.ndarray) -> List[int]:
        """Wall offsets at ``ticks``; linear between points, held after the last one."""
        ordered = sorted(points, key=lambda point: point.tick)
        point_ticks = np.array([point.tick for point in ordered], dtype=np.int64)
        base = np.array([self.offset(point.lane_offset) for point in ordered], dtype=np.float64)
        last = len(ordered) - 1
        result = np.full(len(ticks), base[last], dtype=np.float64)
        if last > 0:
            index = np.searchsorted(point_ticks, ticks, side="right") - 1
            segment = np.clip(index, 0, last - 1)
            deltas = np.array(
                [self.offset(b.lane_offset - a.lane_offset) for a, b in zip(ordered, ordered[1:])],
                dtype=np.float64,
            )
            spans = np.diff(point_ticks).astype(np.float64)[segment]
            elapsed = (ticks - point_ticks[segment]).astype(np.float64)
            rate = np.divide(elapsed, spans, out=np.zeros_like(elapsed), where=spans > 0)
            interpolated = base[segment] + deltas[segment] * rate
            result = np.where(index < last, interpolated, result)
        return [int(value) for value in np.trunc(result)]

    def _add_field_side(self, side: FieldSide, label: str) -> None:
        for guarded in side.guarded_sections:
            self.add(guarded.start_tick, "setwall", label)
            self.add(guarded.end_tick, "delwall", label)
        for lane in side.side_lanes:
            self.add(lane.valid_range.start_tick, "setnoti", label)
            self.add(lane.valid_range.end_tick, "delnoti", label)
        for lane in side.side_lanes:
            self._add_notes(lane.notes, label)

    def _add_notes(self, notes: Iterable[LaneNote], target: str) -> None:
        for note in notes:
            tick_range = note.tick_range
            if note.is_tap:
                self.add(tick_range.start_tick, "extap" if note.is_critical else "tap", target)
            else:
                self.add(tick_range.start_tick, "exholdset" if note.is_critical else "holdset", target)
                self.add(tick_range.end_tick, "holdend", target)

    def _add_surface_lanes(self) -> None:
        lanes: List[SurfaceLane] = sorted(self.score.surface_lanes, key=lambda lane: lane.min_tick)
        allocator = IdentifierAllocator.numbered(self.settings.lane_pool_size)
        for lane in lanes:
            lane_number = allocator.allocate(lane.min_tick, lane.max_tick - lane.min_tick)
            logger.debug(
                "Allocated lane=%s start=%d end=%d color=%s",
                lane_number,
                lane.min_tick,
                lane.max_tick,
                lane.color.value,
            )
            points = sorted(lane.points, key=lambda point: point.tick)
            first, last = points[0], points[-1]
            self.add(first.tick, "laneset", lane_number, lane.color.chart_code, self.offset(first.lane_offset))
            for point in points[1:-1]:
                self.add(point.tick, "lanepos", lane_number, self.offset(point.lane_offset), "")
            self._add_notes(
                sorted(lane.notes, key=lambda note: note.tick_range.start_tick),
                lane_number,
            )
            self.add(last.tick, "laneend", lane_number, self.offset(last.lane_offset), "")


def build_chart_lines(book: ScoreBook, settings: Optional[Settings] = None) -> List[ChartLine]:
    """Collect every chart line for ``book`` in emission order (not yet sorted)."""
    settings = settings or Settings()
    return _ChartBuilder(book, settings).build()


def render_chart(book: ScoreBook, settings: Optional[Settings] = None) -> str:
    """Render the full chart text: header, tick-sorted body and the ``fin`` line."""
    settings = settings or Settings()
    lines = build_chart_lines(book, settings)
    output = [
        f"#title {book.title or ''}",
        f"#artist {book.artist or ''}",
        f"#notes {book.notes_designer or ''}",
        "#datend",
    ]
    output.extend(line.text for line in sorted(lines, key=lambda line: line.tick))
    output.append(FIN_LINE)
    return "".join(text + settings.newline for text in output)


def write_chart(
    book: ScoreBook,
    path: Union[str, Path],
    settings: Optional[Settings] = None,
) -> Path:
    """Render ``book`` and write it to ``path`` using the configured encoding."""
    settings = settings or Settings()
    path = Path(path)
    text = render_chart(book, settings)
    try:
        data = text.encode(settings.encoding)
    except UnicodeEncodeError as exc:
        logger.warning(
            "Chart text not representable in %s (%s); replacing unsupported characters",
            settings.encoding,
            exc.reason,
        )
        data = text.encode(settings.encoding, errors="replace")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info(
        "Wrote chart path=%s bytes=%d encoding=%s",
        path,
        len(data),
        settings.encoding,
    )
    return path
