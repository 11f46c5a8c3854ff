from .loader import load_score_book, parse_score_book
from .model import (
    Bell,
    BpmChange,
    Bullet,
    Field,
    FieldPoint,
    FieldSide,
    Flick,
    HighSpeedChange,
    HorizontalDirection,
    LaneNote,
    Score,
    ScoreBook,
    ScoreEvents,
    SideLane,
    SurfaceLane,
    SurfaceLaneColor,
    TickRange,
)

__all__ = [
    "Bell",
    "BpmChange",
    "Bullet",
    "Field",
    "FieldPoint",
    "FieldSide",
    "Flick",
    "HighSpeedChange",
    "HorizontalDirection",
    "LaneNote",
    "Score",
    "ScoreBook",
    "ScoreEvents",
    "SideLane",
    "SurfaceLane",
    "SurfaceLaneColor",
    "TickRange",
    "load_score_book",
    "parse_score_book",
]
