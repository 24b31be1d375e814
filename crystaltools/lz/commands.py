"""Compression commands, their encoded sizes and the shared limits of the format."""

from __future__ import annotations

from dataclasses import dataclass

NUM_COMPRESSORS = 4
COMPRESSION_METHODS = 96
MAX_FILE_SIZE = 32768
SHORT_COMMAND_COUNT = 32
MAX_COMMAND_COUNT = 1024
# Highest negative offset that a copy command can encode
LOOKBACK_LIMIT = 128
# Maximum lookahead distance for the first pass of multi-pass compression
LOOKAHEAD_LIMIT = 3072
MULTIPASS_SKIP_THRESHOLD = 64

LITERAL = 0
REPEAT_BYTE = 1
REPEAT_WORD = 2
ZEROS = 3
COPY_NORMAL = 4
COPY_FLIPPED = 5
COPY_REVERSED = 6
PLACEHOLDER = 7

# Each byte with its bit order reversed
BIT_FLIPPING_TABLE = bytes(int(f"{value:08b}"[::-1], 2) for value in range(256))


class LzError(Exception):
    """A failure while compressing, decompressing or writing a command stream."""

    def __init__(self, message: str, status: int = 1) -> None:
        super().__init__(message)
        self.status = status


@dataclass
class Command:
    """One command of a compressed stream.

    ``count`` is always the length of the uncompressed data the command produces.
    ``value`` is the source offset of a literal, the repeated bytes of a repetition,
    or the offset (negative when relative) of a copy. Command 7 is a placeholder.
    """

    command: int = LITERAL
    count: int = 0
    value: int = 0


def command_size(command: Command) -> int:
    """Return the number of bytes the command takes in the compressed stream."""
    header = 1 + (command.count > SHORT_COMMAND_COUNT)
    if command.command & 4:
        return header + 1 + (command.value >= 0)
    return header + (command.count, 1, 2, 0)[command.command]


def compressed_length(commands) -> int:
    """Return the encoded size of a command sequence, ignoring placeholders."""
    return sum(command_size(c) for c in commands if c.command != PLACEHOLDER)


def is_better(new: Command, old: Command) -> bool:
    """Tell whether new saves strictly more bytes than old."""
    if new.command == PLACEHOLDER:
        return False
    if old.command == PLACEHOLDER:
        return True
    return new.count - command_size(new) > old.count - command_size(old)


def pick_best_command(*args: Command) -> Command:
    """Return the command saving the most bytes; the earliest one wins ties."""
    if not args:
        raise TypeError("pick_best_command needs at least one command")
    best = args[0]
    for command in args[1:]:
        if is_better(command, best):
            best = command
    return best


def flip_bits(data: bytes) -> bytes:
    """Reverse the bit order of every byte."""
    return bytes(data).translate(BIT_FLIPPING_TABLE)