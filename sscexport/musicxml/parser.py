from __future__ import annotations

from fractions import Fraction
from pathlib import Path
from typing import List
from xml.etree.ElementTree import ParseError

from music21 import converter, meter, stream, tempo
from music21.exceptions21 import Music21Exception

from sscexport.errors import ScoreFormatError
from sscexport.score.model import BpmChange, ScoreEvents
from sscexport.timeline import TimeSignatureChange


def parse_musicxml_timing(path: str | Path, *, ticks_per_beat: int) -> ScoreEvents:
    """Read tempo and time-signature changes from MusicXML (.xml or .mxl).

    Offsets come from the first part and are converted from quarter lengths
    to ticks. When the file declares none, 120 BPM and 4/4 at tick 0 are used.
    Unreadable files raise ``ScoreFormatError``.
    """
    if ticks_per_beat <= 0:
        raise ValueError(f"ticks_per_beat must be positive: {ticks_per_beat}")
    try:
        score = converter.parse(str(path))
    except (Music21Exception, ParseError) as exc:
        raise ScoreFormatError(str(path), f"cannot read MusicXML: {exc}") from exc
    parts = list(score.parts)
    source = parts[0] if parts else score
    return ScoreEvents(
        bpm_changes=_extract_tempos(source, ticks_per_beat),
        time_signature_changes=_extract_time_signatures(source, ticks_per_beat),
    )


def _to_tick(offset: float | Fraction, ticks_per_beat: int) -> int:
    return int(round(Fraction(offset) * ticks_per_beat))


def _extract_tempos(source: stream.Stream, ticks_per_beat: int) -> List[BpmChange]:
    changes: dict[int, BpmChange] = {}
    for mark in source.recurse().getElementsByClass(tempo.MetronomeMark):
        bpm = _metronome_bpm(mark)
        if bpm is None:
            continue
        tick = _to_tick(mark.getOffsetInHierarchy(source), ticks_per_beat)
        changes[tick] = BpmChange(tick=tick, bpm=bpm)
    if not changes:
        return [BpmChange(tick=0, bpm=120.0)]
    return [changes[tick] for tick in sorted(changes)]


def _metronome_bpm(mark: tempo.MetronomeMark) -> float | None:
    if hasattr(mark, "getQuarterBPM"):
        bpm = mark.getQuarterBPM()
        if bpm is not None:
            return float(bpm)
    if mark.number is not None:
        return float(mark.number)
    return None


def _extract_time_signatures(source: stream.Stream, ticks_per_beat: int) -> List[TimeSignatureChange]:
    changes: dict[int, TimeSignatureChange] = {}
    for signature in source.recurse().getElementsByClass(meter.TimeSignature):
        tick = _to_tick(signature.getOffsetInHierarchy(source), ticks_per_beat)
        changes[tick] = TimeSignatureChange(
            tick=tick,
            numerator=int(signature.numerator),
            denominator=int(signature.denominator),
        )
    if not changes:
        return [TimeSignatureChange(tick=0, numerator=4, denominator=4)]
    return [changes[tick] for tick in sorted(changes)]
