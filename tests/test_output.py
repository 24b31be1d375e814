import pytest

from crystaltools.lz.commands import Command, LzError
from crystaltools.lz.output import (
    encode_command,
    encode_commands,
    format_command,
    format_commands_and_padding,
    format_commands_text,
)
from crystaltools.lz.uncomp import get_commands_from_file, get_uncompressed_data


def test_format_zeros():
    assert format_command(Command(3, 5), b"") == "\tlzzero 5\n"


def test_format_repeat_byte():
    assert format_command(Command(1, 4, 0xAB), b"") == "\tlzrepeat 4, $ab\n"


def test_format_repeat_word():
    assert format_command(Command(2, 6, 0x1234), b"") == "\tlzrepeat 6, $34, $12\n"


def test_format_literal():
    assert format_command(Command(0, 2, 1), b"\x00\x10\x20") == "\tlzdata $10, $20\n"


def test_format_copies():
    assert format_command(Command(4, 5, -3), b"") == "\tlzcopy normal, 5, -3\n"
    assert format_command(Command(6, 5, 0x10), b"") == "\tlzcopy reversed, 5, $0010\n"
    assert format_command(Command(5, 9, -128), b"") == "\tlzcopy flipped, 9, -128\n"


@pytest.mark.parametrize(
    "command",
    [Command(3, 0), Command(3, 1025), Command(7, 1), Command(1, 2, 256), Command(2, 2, -1),
     Command(4, 4, -129), Command(4, 4, 32768), Command(0, 4, 0)],
)
def test_format_invalid(command):
    with pytest.raises(LzError) as info:
        format_command(command, b"ab")
    assert info.value.status == 2


@pytest.mark.parametrize(
    "command",
    [Command(3, 0), Command(1, 2, 256), Command(4, 4, -129), Command(0, 3, 0)],
)
def test_encode_invalid(command):
    with pytest.raises(LzError) as info:
        encode_command(command, b"a")
    assert info.value.status == 2


def test_format_text_end_and_padding():
    text = format_commands_text([Command(3, 5)], b"", 2)
    assert text == "\tlzzero 5\n\tlzend\n\tdb 0, 0\n"


def test_format_text_without_alignment():
    assert format_commands_text([Command(3, 5)], b"", 0).endswith("\tlzend\n")


def test_format_commands_and_padding():
    assert format_commands_and_padding([], b"", b"\x00\x12") == "\tlzend\n\tdb 0, $12\n"
    assert format_commands_and_padding([Command(3, 2)], b"", b"") == "\tlzzero 2\n\tlzend\n"


@pytest.mark.parametrize("alignment", range(0, 6))
def test_encoded_size_is_aligned(alignment):
    stream = encode_commands([Command(0, 3, 0), Command(3, 40)], b"xyz", alignment)
    assert len(stream) % (1 << alignment) == 0
    assert b"\xff" in stream


def test_encode_terminator_only():
    assert encode_commands([], b"") == b"\xff"


def test_long_header():
    encoded = encode_command(Command(3, 100), b"")
    assert len(encoded) == 2
    assert encoded[0] >> 5 == 7


def test_encode_decode_roundtrip():
    data = b"hello"
    commands = [Command(0, 5, 0), Command(1, 3, 0x41), Command(3, 2), Command(4, 3, -5),
                Command(2, 40, 0x4241), Command(6, 2, 4), Command(5, 3, 0)]
    stream = encode_commands(commands, data, 3)
    decoded, remainder = get_commands_from_file(stream)
    assert [(c.command, c.count) for c in decoded] == [(c.command, c.count) for c in commands]
    assert [c.value for c in decoded][1:] == [c.value for c in commands][1:]
    assert (len(stream) - remainder) + remainder == len(stream)
    out = get_uncompressed_data(decoded, stream)
    assert out[:15] == b"helloAAA\x00\x00AAA" + b"AB"
    assert len(out) == sum(c.count for c in commands)