from __future__ import annotations

import math
import unittest

from sscexport.errors import ConfigurationError, OutOfRangeError
from sscexport.timeline import (
    TimelinePositionResolver,
    TimeSignatureChange,
    reduce_fraction,
)


def sig(tick: int, numerator: int, denominator: int) -> TimeSignatureChange:
    return TimeSignatureChange(tick=tick, numerator=numerator, denominator=denominator)


class TestResolverConstruction(unittest.TestCase):
    def test_requires_at_least_one_signature(self) -> None:
        with self.assertRaises(ConfigurationError):
            TimelinePositionResolver.build(480, [])

    def test_rejects_non_positive_ticks_per_beat(self) -> None:
        with self.assertRaises(ConfigurationError):
            TimelinePositionResolver.build(0, [sig(0, 4, 4)])

    def test_rejects_signature_with_empty_bar(self) -> None:
        with self.assertRaises(ConfigurationError):
            TimelinePositionResolver.build(1, [sig(0, 1, 8)])

    def test_mid_bar_change_starts_at_next_bar_boundary(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(0, 4, 4), sig(1000, 3, 4)])
        starts = [(s.start_tick, s.start_bar_index, str(s.signature)) for s in resolver.segments]
        self.assertEqual(starts, [(0, 0, "4/4"), (1920, 1, "3/4")])

    def test_change_on_bar_boundary_keeps_its_tick(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(3840, 3, 4), sig(0, 4, 4)])
        starts = [(s.start_tick, s.start_bar_index) for s in resolver.segments]
        self.assertEqual(starts, [(0, 0), (3840, 2)])

    def test_first_change_after_zero_covers_from_tick_zero(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(960, 3, 4)])
        first = resolver.segments[0]
        self.assertEqual((first.start_tick, first.start_bar_index), (0, 0))
        self.assertEqual(str(first.signature), "3/4")
        position = resolver.resolve(1440)
        self.assertEqual((position.bar_index, position.tick_offset), (1, 0))
        self.assertEqual(str(resolver.resolve(0).signature), "3/4")

    def test_same_tick_changes_last_one_wins(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(0, 4, 4), sig(0, 3, 4)])
        self.assertEqual(len(resolver.segments), 1)
        self.assertEqual(str(resolver.segments[0].signature), "3/4")

    def test_changes_within_one_bar_collapse_to_the_latest(self) -> None:
        resolver = TimelinePositionResolver.build(
            480, [sig(0, 4, 4), sig(1000, 3, 4), sig(1500, 2, 4)]
        )
        starts = [(s.start_tick, s.start_bar_index, str(s.signature)) for s in resolver.segments]
        self.assertEqual(starts, [(0, 0, "4/4"), (1920, 1, "2/4")])


class TestResolverQueries(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = TimelinePositionResolver.build(
            480,
            [sig(0, 4, 4), sig(1000, 3, 4), sig(5000, 7, 8), sig(9000, 5, 4)],
        )

    def test_bar_boundary_in_single_signature(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(0, 4, 4)])
        at_bar = resolver.resolve(1920)
        before = resolver.resolve(1919)
        self.assertEqual((at_bar.bar_index, at_bar.tick_offset), (1, 0))
        self.assertEqual((before.bar_index, before.tick_offset), (0, 1919))

    def test_tick_before_deferred_change_uses_previous_signature(self) -> None:
        position = self.resolver.resolve(1000)
        self.assertEqual(position.bar_index, 0)
        self.assertEqual(position.tick_offset, 1000)
        self.assertEqual(str(position.signature), "4/4")

    def test_tick_inside_three_four(self) -> None:
        position = self.resolver.resolve(1920 + 1440 + 10)
        self.assertEqual(position.bar_index, 2)
        self.assertEqual(position.tick_offset, 10)
        self.assertEqual(str(position.signature), "3/4")

    def test_offsets_stay_inside_bar(self) -> None:
        for tick in range(0, 20000, 7):
            position = self.resolver.resolve(tick)
            bar_length = self.resolver.bar_length(position.signature)
            self.assertGreaterEqual(position.tick_offset, 0)
            self.assertLess(position.tick_offset, bar_length)

    def test_positions_are_monotonic(self) -> None:
        previous = self.resolver.resolve(0)
        for tick in range(1, 20000, 13):
            current = self.resolver.resolve(tick)
            self.assertLessEqual(previous.bar_index, current.bar_index)
            if previous.bar_index == current.bar_index:
                self.assertLessEqual(previous.tick_offset, current.tick_offset)
            previous = current

    def test_queries_do_not_depend_on_call_order(self) -> None:
        ticks = [15000, 3, 9000, 1920, 5000]
        forward = [self.resolver.resolve(tick) for tick in ticks]
        backward = [self.resolver.resolve(tick) for tick in reversed(ticks)]
        self.assertEqual(forward, list(reversed(backward)))

    def test_negative_tick_is_out_of_range(self) -> None:
        with self.assertRaises(OutOfRangeError):
            self.resolver.resolve(-1)

    def test_signature_at_bar(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(0, 4, 4), sig(3840, 3, 4)])
        self.assertEqual(str(resolver.signature_at_bar(0)), "4/4")
        self.assertEqual(str(resolver.signature_at_bar(1)), "4/4")
        self.assertEqual(str(resolver.signature_at_bar(2)), "3/4")
        self.assertEqual(str(resolver.signature_at_bar(100)), "3/4")
        with self.assertRaises(OutOfRangeError):
            resolver.signature_at_bar(-1)

    def test_format_position_uses_whole_note_fraction(self) -> None:
        resolver = TimelinePositionResolver.build(480, [sig(0, 4, 4)])
        self.assertEqual(resolver.format_position(0), "*1/0/1")
        self.assertEqual(resolver.format_position(480), "*1/1/4")
        self.assertEqual(resolver.format_position(1920 + 240), "*2/1/8")
        self.assertEqual(resolver.format_position(1000), "*1/25/48")


class TestReduceFraction(unittest.TestCase):
    def test_zero_numerator(self) -> None:
        self.assertEqual(reduce_fraction(0, 1920), (0, 1))

    def test_examples(self) -> None:
        self.assertEqual(reduce_fraction(480, 1920), (1, 4))
        self.assertEqual(reduce_fraction(6, 4), (3, 2))
        self.assertEqual(reduce_fraction(7, 13), (7, 13))

    def test_lowest_terms_preserve_ratio(self) -> None:
        for denominator in (1, 960, 1440, 1920, 1680):
            for numerator in range(0, denominator, 37):
                reduced_num, reduced_den = reduce_fraction(numerator, denominator)
                self.assertEqual(numerator * reduced_den, reduced_num * denominator)
                self.assertEqual(math.gcd(reduced_num, reduced_den), 1)

    def test_rejects_invalid_denominator(self) -> None:
        with self.assertRaises(ValueError):
            reduce_fraction(1, 0)


if __name__ == "__main__":
    unittest.main()
