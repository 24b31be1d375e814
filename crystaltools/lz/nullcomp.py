"""Store data uncompressed, using literal commands only.

Two methods: flags 0 splits a trailing 33-to-64-byte block into two short blocks;
flags 1 does not.
"""

from __future__ import annotations

from crystaltools.lz.commands import (
    LITERAL,
    MAX_COMMAND_COUNT,
    SHORT_COMMAND_COUNT,
    Command,
)


def store_uncompressed(data: bytes, flipped: bytes = b"", flags: int = 0) -> list[Command]:
    """Cover data with literal commands of at most the maximum size."""
    commands: list[Command] = []
    position = 0
    remainder = len(data)
    while remainder:
        block = min(remainder, MAX_COMMAND_COUNT)
        if not flags & 1 and SHORT_COMMAND_COUNT < block <= 2 * SHORT_COMMAND_COUNT:
            block = SHORT_COMMAND_COUNT
        commands.append(Command(LITERAL, block, position))
        position += block
        remainder -= block
    return commands