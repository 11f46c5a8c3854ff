"""
Pydantic models describing the on-disk score book document.

The loader validates a decoded YAML/JSON mapping against ``ScoreBookDocument``
and converts the result into the frozen dataclasses in ``score.model``.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, field_validator, model_validator

from sscexport.score.model import HorizontalDirection, SurfaceLaneColor

# Accept ints and floats but never booleans.
Number = Union[StrictInt, StrictFloat]


class BpmEntry(BaseModel):
    tick: StrictInt = Field(..., ge=0)
    bpm: Number

    @field_validator("bpm")
    @classmethod
    def _positive_bpm(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"bpm must be positive, got {value}")
        return value


class TimeSignatureEntry(BaseModel):
    tick: StrictInt = Field(..., ge=0)
    numerator: StrictInt = Field(..., ge=1)
    denominator: StrictInt = Field(..., ge=1)


class HighSpeedEntry(BaseModel):
    tick: StrictInt = Field(..., ge=0)
    speed_ratio: Number


class EventsEntry(BaseModel):
    bpm: List[BpmEntry] = Field(default_factory=list)
    time_signatures: List[TimeSignatureEntry] = Field(default_factory=list)
    high_speeds: List[HighSpeedEntry] = Field(default_factory=list)


class PointEntry(BaseModel):
    tick: StrictInt = Field(..., ge=0)
    lane_offset: StrictInt


class NoteEntry(BaseModel):
    tick: StrictInt = Field(..., ge=0)
    duration: StrictInt = Field(0, ge=0)
    critical: StrictBool = False


class RangeEntry(BaseModel):
    start_tick: StrictInt = Field(..., ge=0)
    end_tick: StrictInt = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "RangeEntry":
        if self.end_tick < self.start_tick:
            raise ValueError(f"end_tick {self.end_tick} precedes start_tick {self.start_tick}")
        return self


class SideLaneEntry(RangeEntry):
    notes: List[NoteEntry] = Field(default_factory=list)


class FieldSideEntry(BaseModel):
    wall_points: List[PointEntry]
    guarded_sections: List[RangeEntry] = Field(default_factory=list)
    side_lanes: List[SideLaneEntry] = Field(default_factory=list)

    @field_validator("wall_points")
    @classmethod
    def _require_wall_point(cls, value: List[PointEntry]) -> List[PointEntry]:
        if not value:
            raise ValueError("at least one wall point is required")
        return value


class FieldEntry(BaseModel):
    left: FieldSideEntry
    right: FieldSideEntry


class SurfaceLaneEntry(BaseModel):
    color: SurfaceLaneColor
    points: List[PointEntry]
    notes: List[NoteEntry] = Field(default_factory=list)

    @field_validator("color", mode="before")
    @classmethod
    def _lower_color(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("points")
    @classmethod
    def _require_two_points(cls, value: List[PointEntry]) -> List[PointEntry]:
        if len(value) < 2:
            raise ValueError("a surface lane needs at least two points")
        return value


class FlickEntry(PointEntry):
    direction: HorizontalDirection
    critical: StrictBool = False

    @field_validator("direction", mode="before")
    @classmethod
    def _lower_direction(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class ScoreBookDocument(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    notes_designer: Optional[str] = None
    ticks_per_beat: Optional[StrictInt] = Field(None, ge=1)
    half_horizontal_resolution: StrictInt = Field(20, ge=1)
    events: EventsEntry = Field(default_factory=EventsEntry)
    field: FieldEntry
    surface_lanes: List[SurfaceLaneEntry] = Field(default_factory=list)
    flicks: List[FlickEntry] = Field(default_factory=list)
    bells: List[PointEntry] = Field(default_factory=list)
    bullets: List[PointEntry] = Field(default_factory=list)

    @field_validator("title", "artist", "notes_designer", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Titles such as 1999 come back from YAML as numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("events", mode="before")
    @classmethod
    def _empty_events(cls, value: Any) -> Any:
        return {} if value is None else value
