from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from sscexport.config import NEWLINES, Settings
from sscexport.errors import (
    ConfigurationError,
    OrderingError,
    OutOfRangeError,
    PoolExhaustedError,
    ScoreFormatError,
)
from sscexport.export import write_chart
from sscexport.logging_utils import chart_log_context, configure_logging
from sscexport.musicxml import parse_musicxml_timing
from sscexport.score import load_score_book

logger = logging.getLogger(__name__)

EXPORT_ERRORS = (
    ConfigurationError,
    OrderingError,
    OutOfRangeError,
    PoolExhaustedError,
    ScoreFormatError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sscexport",
        description="Export a score book (YAML/JSON) to a Shooting Simulation Chart (.ssc).",
    )
    parser.add_argument("input", type=Path, help="Score book file (.yaml, .yml or .json).")
    parser.add_argument("-o", "--output", type=Path, help="Output chart path (default: INPUT with .ssc).")
    parser.add_argument("--encoding", help="Output text encoding (default: shift_jis).")
    parser.add_argument("--newline", choices=sorted(NEWLINES), help="Line terminator (default: crlf).")
    parser.add_argument("--lane-pool-size", type=int, help="Number of surface lane identifiers.")
    parser.add_argument(
        "--timing-from",
        type=Path,
        help="MusicXML file whose tempo and time signatures replace the score book's.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> Path:
    book = load_score_book(args.input, default_ticks_per_beat=settings.default_ticks_per_beat)
    if args.timing_from is not None:
        events = parse_musicxml_timing(args.timing_from, ticks_per_beat=book.score.ticks_per_beat)
        logger.info(
            "Timing replaced from %s bpm_changes=%d time_signatures=%d",
            args.timing_from,
            len(events.bpm_changes),
            len(events.time_signature_changes),
        )
        events = dataclasses.replace(
            events,
            high_speed_changes=book.score.events.high_speed_changes,
        )
        book = dataclasses.replace(book, score=dataclasses.replace(book.score, events=events))
    output = args.output or args.input.with_suffix(".ssc")
    return write_chart(book, output, settings)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env().with_overrides(
            encoding=args.encoding,
            newline=args.newline,
            lane_pool_size=args.lane_pool_size,
        )
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    configure_logging(settings, debug=args.debug)
    with chart_log_context(args.input.stem, str(args.input)):
        logger.debug("Export settings %s", settings)
        try:
            output = run(args, settings)
        except EXPORT_ERRORS as exc:
            logger.error("Export failed: %s", exc, extra={"error": exc.to_payload()})
            print(f"error: {exc}", file=sys.stderr)
            return 1
        except OSError as exc:
            logger.error("Export failed: %s", exc)
            print(f"error: {exc}", file=sys.stderr)
            return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
