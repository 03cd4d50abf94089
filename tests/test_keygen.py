"""Tests for key generation."""

import time

import pytest

from shortlink.errors import ClockUnavailable
from shortlink.keygen import KeyGenerator, clamp_radix, format_radix, parse_radix

from clocks import FrozenClock, TickingClock, START_MILLIS


class TestFormatRadix:
    """Test radix encoding."""

    def test_zero_encodes_as_single_digit(self):
        for radix in (2, 10, 16, 36):
            assert format_radix(0, radix) == "0"

    def test_known_values(self):
        assert format_radix(35, 36) == "z"
        assert format_radix(36, 36) == "10"
        assert format_radix(1000, 36) == "rs"
        assert format_radix(255, 16) == "ff"
        assert format_radix(255, 2) == "11111111"
        assert format_radix(START_MILLIS, 36) == "loyw3v28"

    def test_round_trip(self):
        values = [0, 1, 35, 36, 123456, START_MILLIS, 36 ** 8 - 1, 36 ** 8, 2 ** 64 + 7]
        for radix in (2, 7, 16, 36):
            for value in values:
                assert parse_radix(format_radix(value, radix), radix) == value

    def test_matches_builtin_decoding(self):
        assert int(format_radix(START_MILLIS, 36), 36) == START_MILLIS

    def test_radix_is_clamped(self):
        assert clamp_radix(1) == 2
        assert clamp_radix(0) == 2
        assert clamp_radix(64) == 36
        assert format_radix(255, 1) == "11111111"
        assert format_radix(36 * 36, 100) == "100"

    def test_no_padding(self):
        assert format_radix(36 ** 8 - 1, 36) == "zzzzzzzz"
        assert format_radix(36 ** 8, 36) == "100000000"

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            format_radix(-1, 36)


class TestKeyGenerator:
    """Test time-based key generation."""

    def test_generate_encodes_clock(self):
        generator = KeyGenerator(radix=36, clock=FrozenClock(START_MILLIS))

        assert generator.generate() == "loyw3v28"

    def test_same_millisecond_gives_same_key(self):
        generator = KeyGenerator(clock=FrozenClock())

        assert generator.generate() == generator.generate()

    def test_later_key_sorts_after_earlier_of_equal_length(self):
        generator = KeyGenerator(clock=TickingClock())

        first = generator.generate()
        second = generator.generate()

        assert len(first) == len(second)
        assert second > first

    def test_keys_of_different_length_do_not_sort_chronologically(self):
        """Keys are unpadded, so ordering only holds within one key length."""
        generator = KeyGenerator(clock=TickingClock(36 ** 8 - 1))

        earlier = generator.generate()
        later = generator.generate()

        assert (earlier, later) == ("zzzzzzzz", "100000000")
        assert later < earlier

    def test_radix_clamped(self):
        assert KeyGenerator(radix=99).radix == 36
        assert KeyGenerator(radix=-3).radix == 2

    def test_wall_clock(self):
        before = time.time_ns() // 1_000_000
        key = KeyGenerator().generate()
        after = time.time_ns() // 1_000_000

        assert before <= parse_radix(key) <= after

    def test_clock_before_epoch(self):
        generator = KeyGenerator(clock=FrozenClock(-1))

        with pytest.raises(ClockUnavailable):
            generator.generate()

    def test_unreadable_clock(self):
        def broken_clock():
            raise OSError("clock_gettime failed")

        generator = KeyGenerator(clock=broken_clock)

        with pytest.raises(ClockUnavailable, match="clock_gettime"):
            generator.current_millis()
