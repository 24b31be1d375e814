"""Single-pass compressor: pick the best command at each position in one sweep.

72 methods. The flags are bit fields plus two selectors:
  1: prefer repetition commands over copy commands of equal savings
  2: after a literal that is not at a maximum size (32 or 1024), don't emit a
     copy or repetition whose count equals its encoded size
  4: don't emit long copy commands
  scan delay (0, 8, 16): 0, 1 or 2 bytes are forced into literals after each
     non-literal command
  copy preference when tied (0, 24, 48): normal/reversed/flipped,
     reversed/flipped/normal, flipped/reversed/normal
"""

from __future__ import annotations

from dataclasses import replace

from crystaltools.lz.commands import (
    COPY_FLIPPED,
    COPY_NORMAL,
    COPY_REVERSED,
    LITERAL,
    LOOKBACK_LIMIT,
    MAX_COMMAND_COUNT,
    PLACEHOLDER,
    SHORT_COMMAND_COUNT,
    Command,
    command_size,
    flip_bits,
    pick_best_command,
)
from crystaltools.lz.packing import optimize, repack
from crystaltools.lz.repcomp import find_repetition_at_position


def _offset(best_match: int, position: int) -> int:
    if best_match + LOOKBACK_LIMIT >= position:
        return best_match - position
    return best_match


def scan_forwards(data: bytes, position: int, limit: int, source: bytes) -> tuple[int, int]:
    """Find the longest match for data[position:] starting before position in source.

    Return (count, offset); count is 0 when nothing matches. Later matches win ties.
    """
    first = data[position]
    best_match = 0
    best_length = 0
    candidate = source.find(first, 0, position)
    while candidate >= 0:
        length = 0
        while length < limit and source[candidate + length] == data[position + length]:
            length += 1
        length = min(length, MAX_COMMAND_COUNT)
        if length >= best_length:
            best_match, best_length = candidate, length
        candidate = source.find(first, candidate + 1, position)
    if not best_length:
        return 0, 0
    return best_length, _offset(best_match, position)


def scan_backwards(data: bytes, limit: int, position: int) -> tuple[int, int]:
    """Find the longest earlier run that, read backwards, matches data[position:].

    Return (count, offset); count is 0 when nothing matches. Later matches win ties.
    """
    limit = min(limit, position)
    target = data[position]
    best_match = 0
    best_length = 0
    candidate = data.find(target, 0, position)
    while candidate >= 0:
        length = 0
        while (
            length <= candidate
            and length < limit
            and data[candidate - length] == data[position + length]
        ):
            length += 1
        length = min(length, MAX_COMMAND_COUNT)
        if length >= best_length:
            best_match, best_length = candidate, length
        candidate = data.find(target, candidate + 1, position)
    if not best_length:
        return 0, 0
    return best_length, _offset(best_match, position)


def find_best_copy(data: bytes, position: int, length: int, flipped: bytes, flags: int) -> Command:
    """Return the best copy command at position, or a placeholder if there is none."""
    simple = Command(PLACEHOLDER)
    flipped_copy = Command(PLACEHOLDER)
    backwards = Command(PLACEHOLDER)
    count, offset = scan_forwards(data, position, length - position, data)
    if count:
        simple = Command(COPY_NORMAL, count, offset)
    count, offset = scan_forwards(data, position, length - position, flipped)
    if count:
        flipped_copy = Command(COPY_FLIPPED, count, offset)
    count, offset = scan_backwards(data, length - position, position)
    if count:
        backwards = Command(COPY_REVERSED, count, offset)
    preference = flags // 24
    if preference == 0:
        best = pick_best_command(simple, backwards, flipped_copy)
    elif preference == 1:
        best = pick_best_command(backwards, flipped_copy, simple)
    else:
        best = pick_best_command(flipped_copy, backwards, simple)
    if flags & 4 and best.count > SHORT_COMMAND_COUNT:
        best = replace(best, count=SHORT_COMMAND_COUNT)
    return best


def find_best_repetition(data: bytes, position: int, length: int) -> Command:
    """Return the repetition command that starts at position."""
    return find_repetition_at_position(data, position, length)


def try_compress_single_pass(data: bytes, flipped: bytes | None = None, flags: int = 0) -> list[Command]:
    """Compress data in one pass with the behaviour selected by flags."""
    data = bytes(data)
    if flipped is None:
        flipped = flip_bits(data)
    size = len(data)
    commands: list[Command] = []
    position = 0
    previous_data = 0
    scan_delay = 0
    delay_flag = (flags >> 3) % 3
    while position < size:
        copy = find_best_copy(data, position, size, flipped, flags)
        repetition = find_best_repetition(data, position, size)
        if flags & 1:
            best = pick_best_command(repetition, copy)
        else:
            best = pick_best_command(copy, repetition)
        best = pick_best_command(Command(LITERAL, 1, position), best)
        if (
            flags & 2
            and command_size(best) == best.count
            and previous_data
            and previous_data not in (SHORT_COMMAND_COUNT, MAX_COMMAND_COUNT)
        ):
            best = Command(LITERAL, 1, position)
        if delay_flag:
            if scan_delay >= delay_flag:
                scan_delay = 0
            elif best.command:
                scan_delay += 1
                best = Command(LITERAL, 1, position)
        if best.command:
            previous_data = 0
        else:
            previous_data = (previous_data + best.count) & 0xFFFF
        commands.append(best)
        position += best.count
    return repack(optimize(commands))