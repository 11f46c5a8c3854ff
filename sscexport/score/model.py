from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from sscexport.timeline import TimeSignatureChange


class SurfaceLaneColor(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"

    @property
    def chart_code(self) -> int:
        return {"red": 0, "green": 1}.get(self.value, 2)


class HorizontalDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class BpmChange:
    tick: int
    bpm: float


@dataclass(frozen=True)
class HighSpeedChange:
    tick: int
    speed_ratio: float


@dataclass(frozen=True)
class ScoreEvents:
    bpm_changes: Sequence[BpmChange]
    time_signature_changes: Sequence[TimeSignatureChange]
    high_speed_changes: Sequence[HighSpeedChange] = ()


@dataclass(frozen=True)
class TickRange:
    start_tick: int
    duration: int

    @property
    def end_tick(self) -> int:
        return self.start_tick + self.duration


@dataclass(frozen=True)
class FieldPoint:
    tick: int
    lane_offset: int


@dataclass(frozen=True)
class LaneNote:
    tick_range: TickRange
    is_critical: bool = False

    @property
    def is_tap(self) -> bool:
        return self.tick_range.duration == 0


@dataclass(frozen=True)
class SideLane:
    valid_range: TickRange
    notes: Sequence[LaneNote] = ()


@dataclass(frozen=True)
class FieldSide:
    wall_points: Sequence[FieldPoint]
    guarded_sections: Sequence[TickRange] = ()
    side_lanes: Sequence[SideLane] = ()


@dataclass(frozen=True)
class Field:
    left: FieldSide
    right: FieldSide


@dataclass(frozen=True)
class SurfaceLane:
    color: SurfaceLaneColor
    points: Sequence[FieldPoint]
    notes: Sequence[LaneNote] = ()

    @property
    def min_tick(self) -> int:
        return min(point.tick for point in self.points)

    @property
    def max_tick(self) -> int:
        return max(point.tick for point in self.points)


@dataclass(frozen=True)
class Flick:
    position: FieldPoint
    direction: HorizontalDirection
    is_critical: bool = False


@dataclass(frozen=True)
class Bell:
    position: FieldPoint


@dataclass(frozen=True)
class Bullet:
    position: FieldPoint


@dataclass(frozen=True)
class Score:
    ticks_per_beat: int
    half_horizontal_resolution: int
    events: ScoreEvents
    field: Field
    surface_lanes: Sequence[SurfaceLane] = ()
    flicks: Sequence[Flick] = ()
    bells: Sequence[Bell] = ()
    bullets: Sequence[Bullet] = ()


@dataclass(frozen=True)
class ScoreBook:
    title: Optional[str]
    artist: Optional[str]
    notes_designer: Optional[str]
    score: Score
