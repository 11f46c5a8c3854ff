from .allocator import IdentifierAllocator
from .resolver import (
    BarPosition,
    TimelinePositionResolver,
    TimeSignatureChange,
    TimeSignatureSegment,
    reduce_fraction,
)

__all__ = [
    "BarPosition",
    "IdentifierAllocator",
    "TimelinePositionResolver",
    "TimeSignatureChange",
    "TimeSignatureSegment",
    "reduce_fraction",
]
