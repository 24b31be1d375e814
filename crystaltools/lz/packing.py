"""Merge adjacent commands and drop placeholders from a command sequence."""

from __future__ import annotations

from dataclasses import replace

from crystaltools.lz.commands import (
    LITERAL,
    MAX_COMMAND_COUNT,
    PLACEHOLDER,
    REPEAT_BYTE,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
    command_size,
)


def optimize(commands) -> list[Command]:
    """Return a copy of commands with mergeable neighbours joined.

    Merged-away commands become placeholders; pass the result to repack.
    """
    work = [replace(c) for c in commands]
    start = 0
    while start < len(work) and work[start].command == PLACEHOLDER:
        start += 1
    if len(work) - start < 2:
        return work
    current = work[start]
    for following in work[start + 1 :]:
        if following.command == PLACEHOLDER:
            continue
        joined = current.count + following.count
        if (
            current.command == LITERAL
            and command_size(following) == following.count
            and joined <= MAX_COMMAND_COUNT
            and (current.count > SHORT_COMMAND_COUNT or joined <= SHORT_COMMAND_COUNT)
        ):
            current.count = joined
            following.command = PLACEHOLDER
            continue
        if following.command == current.command:
            if current.command == LITERAL:
                if current.value + current.count == following.value:
                    current.count = joined
                    following.command = PLACEHOLDER
                    if current.count <= MAX_COMMAND_COUNT:
                        continue
                    following.command = LITERAL
                    following.value = current.value + MAX_COMMAND_COUNT
                    following.count = current.count - MAX_COMMAND_COUNT
                    current.count = MAX_COMMAND_COUNT
            elif current.command == ZEROS or (
                current.command == REPEAT_BYTE and current.value == following.value
            ):
                if joined <= MAX_COMMAND_COUNT:
                    current.count = joined
                    following.command = PLACEHOLDER
                    continue
                following.count = joined - MAX_COMMAND_COUNT
                current.count = MAX_COMMAND_COUNT
        current = following
    return work


def repack(commands) -> list[Command]:
    """Return the commands that are not placeholders, in order."""
    return [c for c in commands if c.command != PLACEHOLDER]