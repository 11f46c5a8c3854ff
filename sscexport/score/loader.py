"""
Score book loading from YAML or JSON documents.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Sequence, Union

import yaml
from pydantic import ValidationError

from sscexport.errors import ScoreFormatError
from sscexport.score.model import (
    Bell,
    BpmChange,
    Bullet,
    Field,
    FieldPoint,
    FieldSide,
    Flick,
    HighSpeedChange,
    LaneNote,
    Score,
    ScoreBook,
    ScoreEvents,
    SideLane,
    SurfaceLane,
    TickRange,
)
from sscexport.score.schema import (
    EventsEntry,
    FieldSideEntry,
    NoteEntry,
    PointEntry,
    RangeEntry,
    ScoreBookDocument,
)
from sscexport.timeline import TimeSignatureChange

logger = logging.getLogger(__name__)

DEFAULT_TICKS_PER_BEAT = 480
DEFAULT_BPM = 120.0


def load_score_book(
    path: Union[str, Path],
    *,
    default_ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
) -> ScoreBook:
    """
    Load a score book from a ``.json`` file or a YAML (``.yaml``/``.yml``) file.

    Schema (see ``score.schema.ScoreBookDocument``):

        title, artist, notes_designer: optional strings
        ticks_per_beat: int (default 480)
        half_horizontal_resolution: int (default 20)
        events: {bpm: [...], time_signatures: [...], high_speeds: [...]}
        field: {left: FieldSide, right: FieldSide}
        surface_lanes, flicks, bells, bullets: lists

    Raises:
        ScoreFormatError: when the document or one of its fields is invalid.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        if path.suffix.lower() == ".json":
            try:
                document = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ScoreFormatError(str(path), f"invalid JSON: {exc}") from exc
        else:
            try:
                document = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ScoreFormatError(str(path), f"invalid YAML: {exc}") from exc
    book = parse_score_book(document, default_ticks_per_beat=default_ticks_per_beat)
    logger.info(
        "Loaded score book path=%s title=%s surface_lanes=%d",
        path,
        book.title,
        len(book.score.surface_lanes),
    )
    return book


def parse_score_book(
    document: Any,
    *,
    default_ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT,
) -> ScoreBook:
    """Validate an already-decoded document and build a ScoreBook from it."""
    try:
        entry = ScoreBookDocument.model_validate(document)
    except ValidationError as exc:
        raise _to_format_error(exc) from exc
    score = Score(
        ticks_per_beat=entry.ticks_per_beat or default_ticks_per_beat,
        half_horizontal_resolution=entry.half_horizontal_resolution,
        events=_events(entry.events),
        field=Field(left=_field_side(entry.field.left), right=_field_side(entry.field.right)),
        surface_lanes=[
            SurfaceLane(color=lane.color, points=_points(lane.points), notes=_notes(lane.notes))
            for lane in entry.surface_lanes
        ],
        flicks=[
            Flick(position=_point(flick), direction=flick.direction, is_critical=flick.critical)
            for flick in entry.flicks
        ],
        bells=[Bell(position=_point(bell)) for bell in entry.bells],
        bullets=[Bullet(position=_point(bullet)) for bullet in entry.bullets],
    )
    return ScoreBook(
        title=entry.title,
        artist=entry.artist,
        notes_designer=entry.notes_designer,
        score=score,
    )


def _to_format_error(exc: ValidationError) -> ScoreFormatError:
    """Report the first validation error with a ``$.a.b[0].c`` style path."""
    errors = exc.errors()
    first = errors[0]
    path = "$" + "".join(
        f"[{part}]" if isinstance(part, int) else f".{part}" for part in first["loc"]
    )
    detail = first["msg"]
    if len(errors) > 1:
        detail = f"{detail} (+{len(errors) - 1} more errors)"
    return ScoreFormatError(path, detail)


def _events(entry: EventsEntry) -> ScoreEvents:
    bpm_changes = [BpmChange(tick=item.tick, bpm=float(item.bpm)) for item in entry.bpm]
    signatures = [
        TimeSignatureChange(tick=item.tick, numerator=item.numerator, denominator=item.denominator)
        for item in entry.time_signatures
    ]
    return ScoreEvents(
        bpm_changes=bpm_changes or [BpmChange(tick=0, bpm=DEFAULT_BPM)],
        time_signature_changes=signatures or [TimeSignatureChange(tick=0, numerator=4, denominator=4)],
        high_speed_changes=[
            HighSpeedChange(tick=item.tick, speed_ratio=float(item.speed_ratio))
            for item in entry.high_speeds
        ],
    )


def _field_side(entry: FieldSideEntry) -> FieldSide:
    return FieldSide(
        wall_points=_points(entry.wall_points),
        guarded_sections=[_tick_range(section) for section in entry.guarded_sections],
        side_lanes=[
            SideLane(valid_range=_tick_range(lane), notes=_notes(lane.notes))
            for lane in entry.side_lanes
        ],
    )


def _tick_range(entry: RangeEntry) -> TickRange:
    return TickRange(start_tick=entry.start_tick, duration=entry.end_tick - entry.start_tick)


def _point(entry: PointEntry) -> FieldPoint:
    return FieldPoint(tick=entry.tick, lane_offset=entry.lane_offset)


def _points(entries: Sequence[PointEntry]) -> List[FieldPoint]:
    return [_point(entry) for entry in entries]


def _notes(entries: Sequence[NoteEntry]) -> List[LaneNote]:
    return [
        LaneNote(tick_range=TickRange(start_tick=note.tick, duration=note.duration), is_critical=note.critical)
        for note in entries
    ]


__all__ = ["load_score_book", "parse_score_book"]
