import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from crystaltools.lz.commands import (
    COPY_NORMAL,
    MAX_COMMAND_COUNT,
    PLACEHOLDER,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
    flip_bits,
)
from crystaltools.lz.spcomp import (
    find_best_copy,
    find_best_repetition,
    scan_backwards,
    scan_forwards,
    try_compress_single_pass,
)
from crystaltools.lz.uncomp import get_uncompressed_data

SAMPLE = (
    bytes(20)
    + bytes(range(1, 15))
    + bytes(range(1, 15))
    + b"\x12\x34" * 10
    + bytes(range(14, 0, -1))
    + b"\xff" * 30
    + flip_bits(bytes(range(1, 15)))
)

structured = st.lists(st.sampled_from([0, 1, 2, 0x80, 0xFF]), max_size=120).map(bytes)


def test_scan_forwards_finds_relative_match():
    data = b"abcabc"
    assert scan_forwards(data, 3, 3, data) == (3, -3)


def test_scan_forwards_without_match():
    data = b"ab"
    assert scan_forwards(data, 1, 1, data)[0] == 0


def test_scan_backwards_finds_mirrored_run():
    assert scan_backwards(b"abccba", 3, 3) == (3, -1)


def test_scan_backwards_at_start_finds_nothing():
    assert scan_backwards(b"aaaa", 4, 0)[0] == 0


def test_find_best_copy_long_and_capped():
    data = bytes(range(50)) * 2
    full = find_best_copy(data, 50, len(data), flip_bits(data), 0)
    assert full == Command(COPY_NORMAL, 50, -50)
    capped = find_best_copy(data, 50, len(data), flip_bits(data), 4)
    assert capped.command == COPY_NORMAL
    assert capped.count == SHORT_COMMAND_COUNT


def test_find_best_copy_at_start_is_placeholder():
    data = b"\x01\x02\x03"
    assert find_best_copy(data, 0, 3, flip_bits(data), 0).command == PLACEHOLDER


def test_find_best_repetition_zeros():
    assert find_best_repetition(bytes(3), 0, 3) == Command(ZEROS, 3, 0)


def test_compress_empty():
    assert try_compress_single_pass(b"", b"", 0) == []


def test_compress_zero_run_is_one_command():
    assert try_compress_single_pass(bytes(100)) == [Command(ZEROS, 100, 0)]


@pytest.mark.parametrize("flags", range(72))
def test_every_method_round_trips(flags):
    commands = try_compress_single_pass(SAMPLE, flip_bits(SAMPLE), flags)
    assert get_uncompressed_data(commands, SAMPLE) == SAMPLE
    assert all(1 <= c.count <= MAX_COMMAND_COUNT for c in commands)
    assert all(c.command != PLACEHOLDER for c in commands)


@pytest.mark.parametrize("flags", [4, 5, 12, 28, 52, 71])
def test_no_long_copies_with_flag_4(flags):
    commands = try_compress_single_pass(SAMPLE, flip_bits(SAMPLE), flags)
    assert all(c.count <= SHORT_COMMAND_COUNT for c in commands if c.command >= COPY_NORMAL)


@settings(max_examples=40, deadline=None)
@given(structured, st.sampled_from([0, 1, 2, 7, 8, 16, 24, 48, 71]))
def test_round_trip_property(data, flags):
    commands = try_compress_single_pass(data, flip_bits(data), flags)
    assert get_uncompressed_data(commands, data) == data
    assert sum(c.count for c in commands) == len(data)