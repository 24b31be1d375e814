"""Read a compressed command stream and rebuild the original data."""

from __future__ import annotations

from crystaltools.lz.commands import (
    BIT_FLIPPING_TABLE,
    COPY_FLIPPED,
    COPY_NORMAL,
    COPY_REVERSED,
    LITERAL,
    MAX_FILE_SIZE,
    REPEAT_BYTE,
    REPEAT_WORD,
    ZEROS,
    Command,
    LzError,
)


def _invalid() -> LzError:
    return LzError("invalid command stream")


def get_commands_from_file(data: bytes) -> tuple[list[Command], int]:
    """Decode commands up to the terminator; return them and the bytes left after it."""
    commands: list[Command] = []
    pos = 0
    remaining = len(data)
    while True:
        if not remaining:
            raise _invalid()
        remaining -= 1
        header = data[pos]
        pos += 1
        kind = header >> 5
        count = header & 31
        if kind == 7:
            kind = count >> 2
            count = (count & 3) << 8
            if kind == 7:
                # A 0xff byte is the terminator; other long-in-long headers are invalid
                if count == 0x300:
                    break
                raise _invalid()
            if not remaining:
                raise _invalid()
            remaining -= 1
            count |= data[pos]
            pos += 1
        count += 1
        value = 0
        if kind == LITERAL:
            if remaining <= count:
                raise _invalid()
            value = pos
            pos += count
            remaining -= count
        elif kind in (REPEAT_BYTE, REPEAT_WORD):
            if remaining <= kind:
                raise _invalid()
            value = int.from_bytes(data[pos : pos + kind], "little")
            pos += kind
            remaining -= kind
        elif kind != ZEROS:
            if not remaining:
                raise _invalid()
            remaining -= 1
            value = data[pos]
            pos += 1
            if value & 128:
                value = 127 - value
            else:
                if not remaining:
                    raise _invalid()
                remaining -= 1
                value = (value << 8) | data[pos]
                pos += 1
        commands.append(Command(kind, count, value))
    return commands, len(data) - pos


def get_uncompressed_data(commands, compressed: bytes) -> bytes:
    """Run the commands; literals read from compressed, copies from the output."""
    out = bytearray()
    for command in commands:
        kind = command.command
        if kind == LITERAL:
            chunk = compressed[command.value : command.value + command.count]
            if command.value < 0 or len(chunk) != command.count:
                raise _invalid()
            out += chunk
        elif kind in (REPEAT_BYTE, REPEAT_WORD):
            out += bytes(
                (command.value >> ((p % kind) * 8)) & 0xFF for p in range(command.count)
            )
        elif kind == ZEROS:
            out += bytes(command.count)
        elif kind in (COPY_NORMAL, COPY_FLIPPED, COPY_REVERSED):
            base = len(out) + command.value if command.value < 0 else command.value
            step = -1 if kind == COPY_REVERSED else 1
            for p in range(command.count):
                index = base + step * p
                if not 0 <= index < len(out):
                    raise _invalid()
                byte = out[index]
                if kind == COPY_FLIPPED:
                    byte = BIT_FLIPPING_TABLE[byte]
                out.append(byte)
        else:
            raise _invalid()
        if len(out) > MAX_FILE_SIZE:
            raise LzError("output data is too large")
    return bytes(out)