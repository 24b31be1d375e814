"""Compress data using only a chosen subset of the repetition commands.

Six methods: the flags value plus one is a bitfield of the allowed kinds, from the
lowest bit: repeat one byte (1), repeat two bytes (2), repeat zeros (3).
"""

from __future__ import annotations

from crystaltools.lz.commands import (
    LITERAL,
    MAX_COMMAND_COUNT,
    PLACEHOLDER,
    REPEAT_BYTE,
    REPEAT_WORD,
    ZEROS,
    Command,
    command_size,
)


def find_repetition_at_position(data: bytes, position: int, length: int) -> Command:
    """Return the repetition command that starts at position."""
    if position + 1 >= length:
        return Command(PLACEHOLDER) if data[position] else Command(ZEROS, 1)
    pair = (data[position], data[position + 1])
    limit = min(length - position, MAX_COMMAND_COUNT)
    count = 2
    while count < limit and data[position + count] == pair[count & 1]:
        count += 1
    first, second = pair
    if first != second:
        if not first and count < 3:
            return Command(ZEROS, 1)
        return Command(REPEAT_WORD, count, first | (second << 8))
    if first:
        return Command(REPEAT_BYTE, count, first)
    return Command(ZEROS, count)


def try_compress_repetitions(data: bytes, flipped: bytes = b"", flags: int = 0) -> list[Command]:
    """Compress data with repetitions of the allowed kinds and literals between them."""
    allowed = (flags + 1) << 1
    size = len(data)
    commands: list[Command] = []
    position = 0
    skipped = 0
    while position < size:
        candidate = find_repetition_at_position(data, position, size)
        if candidate.command == ZEROS and not allowed & (1 << ZEROS):
            candidate.command = REPEAT_BYTE
            candidate.value = 0
        if candidate.command == REPEAT_BYTE and not allowed & (1 << REPEAT_BYTE):
            candidate.command = REPEAT_WORD
            candidate.value |= candidate.value << 8
        if allowed & (1 << candidate.command) and command_size(candidate) <= candidate.count:
            if skipped:
                commands.append(Command(LITERAL, skipped, position - skipped))
            skipped = 0
            commands.append(candidate)
            position += candidate.count
        else:
            position += 1
            skipped += 1
            if skipped == MAX_COMMAND_COUNT:
                commands.append(Command(LITERAL, MAX_COMMAND_COUNT, position - MAX_COMMAND_COUNT))
                skipped = 0
    if skipped:
        commands.append(Command(LITERAL, skipped, position - skipped))
    return commands