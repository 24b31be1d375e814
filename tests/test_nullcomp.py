from hypothesis import given, strategies as st

from crystaltools.lz.commands import MAX_COMMAND_COUNT, SHORT_COMMAND_COUNT, Command
from crystaltools.lz.nullcomp import store_uncompressed
from crystaltools.lz.uncomp import get_uncompressed_data


def test_empty_input():
    assert store_uncompressed(b"", b"", 0) == []


def test_single_short_block():
    data = bytes(10)
    assert store_uncompressed(data, data, 0) == [Command(0, 10, 0)]


def test_medium_block_is_split():
    data = bytes(SHORT_COMMAND_COUNT + 8)
    assert store_uncompressed(data, data, 0) == [
        Command(0, SHORT_COMMAND_COUNT, 0),
        Command(0, 8, SHORT_COMMAND_COUNT),
    ]


def test_flag_keeps_medium_block():
    data = bytes(SHORT_COMMAND_COUNT + 8)
    assert store_uncompressed(data, data, 1) == [Command(0, SHORT_COMMAND_COUNT + 8, 0)]


def test_double_short_block_boundary():
    data = bytes(2 * SHORT_COMMAND_COUNT)
    result = store_uncompressed(data, data, 0)
    assert [c.count for c in result] == [SHORT_COMMAND_COUNT, SHORT_COMMAND_COUNT]


def test_long_input_uses_maximum_blocks():
    data = bytes(MAX_COMMAND_COUNT + 10)
    assert store_uncompressed(data, data, 0) == [
        Command(0, MAX_COMMAND_COUNT, 0),
        Command(0, 10, MAX_COMMAND_COUNT),
    ]


@given(st.binary(max_size=3000), st.integers(0, 1))
def test_blocks_cover_input(data, flags):
    result = store_uncompressed(data, data, flags)
    position = 0
    for command in result:
        assert command.command == 0
        assert command.value == position
        assert 0 < command.count <= MAX_COMMAND_COUNT
        position += command.count
    assert position == len(data)


@given(st.binary(max_size=2000), st.integers(0, 1))
def test_round_trip(data, flags):
    assert get_uncompressed_data(store_uncompressed(data, data, flags), data) == data