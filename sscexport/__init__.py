"""
Score book to Shooting Simulation Chart exporter.

The timeline package holds the bar/beat resolver and the lane identifier
allocator; the export package renders charts on top of them.
"""

from sscexport.errors import (
    ConfigurationError,
    OrderingError,
    OutOfRangeError,
    PoolExhaustedError,
    ScoreFormatError,
)
from sscexport.timeline import (
    BarPosition,
    IdentifierAllocator,
    TimelinePositionResolver,
    TimeSignatureChange,
    TimeSignatureSegment,
    reduce_fraction,
)

__version__ = "0.1.0"

__all__ = [
    "BarPosition",
    "ConfigurationError",
    "IdentifierAllocator",
    "OrderingError",
    "OutOfRangeError",
    "PoolExhaustedError",
    "ScoreFormatError",
    "TimelinePositionResolver",
    "TimeSignatureChange",
    "TimeSignatureSegment",
    "reduce_fraction",
]
