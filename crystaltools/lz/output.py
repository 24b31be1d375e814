"""Write command streams as assembly text or as compressed binary data."""

from __future__ import annotations

from crystaltools.lz.commands import (
    COPY_FLIPPED,
    COPY_NORMAL,
    COPY_REVERSED,
    LITERAL,
    LOOKBACK_LIMIT,
    MAX_COMMAND_COUNT,
    MAX_FILE_SIZE,
    REPEAT_BYTE,
    REPEAT_WORD,
    SHORT_COMMAND_COUNT,
    ZEROS,
    Command,
    LzError,
    command_size,
)

_COPY_KINDS = {COPY_NORMAL: "normal", COPY_FLIPPED: "flipped", COPY_REVERSED: "reversed"}
TERMINATOR = 0xFF


def _invalid() -> LzError:
    return LzError("invalid command in output stream", 2)


def _check_count(command: Command) -> None:
    if not 0 < command.count <= MAX_COMMAND_COUNT:
        raise _invalid()


def _check_copy_value(command: Command) -> None:
    if not -LOOKBACK_LIMIT <= command.value < MAX_FILE_SIZE:
        raise _invalid()


def _literal_bytes(command: Command, data: bytes) -> bytes:
    chunk = bytes(data[command.value : command.value + command.count])
    if command.value < 0 or len(chunk) != command.count:
        raise _invalid()
    return chunk


def _padding(length: int, alignment: int) -> int:
    # The terminator byte counts towards the aligned size
    return ~length & ((1 << alignment) - 1)


def format_command(command: Command, data: bytes) -> str:
    """Render one command as an assembly macro line."""
    _check_count(command)
    kind = command.command
    if kind == LITERAL:
        chunk = _literal_bytes(command, data)
        return "\tlzdata " + ", ".join(f"${byte:02x}" for byte in chunk) + "\n"
    if kind == REPEAT_BYTE:
        if not 0 <= command.value <= 255:
            raise _invalid()
        return f"\tlzrepeat {command.count}, ${command.value:02x}\n"
    if kind == REPEAT_WORD:
        if command.value < 0:
            raise _invalid()
        low = command.value & 0xFF
        high = (command.value >> 8) & 0xFF
        return f"\tlzrepeat {command.count}, ${low:02x}, ${high:02x}\n"
    if kind == ZEROS:
        return f"\tlzzero {command.count}\n"
    if kind in _COPY_KINDS:
        _check_copy_value(command)
        name = _COPY_KINDS[kind]
        if command.value < 0:
            return f"\tlzcopy {name}, {command.count}, {command.value}\n"
        return f"\tlzcopy {name}, {command.count}, ${command.value:04x}\n"
    raise _invalid()


def format_commands_text(commands, data: bytes, alignment: int = 0) -> str:
    """Render a command stream as text, with the terminator and zero padding."""
    lines = []
    length = 0
    for command in commands:
        lines.append(format_command(command, data))
        length += command_size(command)
    lines.append("\tlzend\n")
    pad = _padding(length, alignment)
    if pad:
        lines.append("\tdb " + ", ".join(["0"] * pad) + "\n")
    return "".join(lines)


def format_commands_and_padding(commands, data: bytes, padding: bytes) -> str:
    """Render a command stream as text, followed by the bytes that came after it."""
    lines = [format_command(command, data) for command in commands]
    lines.append("\tlzend\n")
    if padding:
        items = (f"${byte:02x}" if byte else "0" for byte in padding)
        lines.append("\tdb " + ", ".join(items) + "\n")
    return "".join(lines)


def encode_command(command: Command, data: bytes) -> bytes:
    """Encode one command, followed by its bytes when it is a literal."""
    _check_count(command)
    kind = command.command
    count = command.count - 1
    if count < SHORT_COMMAND_COUNT:
        out = bytearray([((kind << 5) + count) & 0xFF])
    else:
        out = bytearray([(224 + (kind << 2) + (count >> 8)) & 0xFF, count & 0xFF])
    if kind in (REPEAT_BYTE, REPEAT_WORD):
        if not 0 <= command.value < 1 << (kind * 8):
            raise _invalid()
        out += command.value.to_bytes(kind, "little")
    elif kind not in (LITERAL, ZEROS):
        _check_copy_value(command)
        if command.value < 0:
            out.append((command.value ^ 127) & 0xFF)
        else:
            out += bytes([(command.value >> 8) & 0xFF, command.value & 0xFF])
    if kind == LITERAL:
        out += _literal_bytes(command, data)
    return bytes(out)


def encode_commands(commands, data: bytes, alignment: int = 0) -> bytes:
    """Encode a command stream with its terminator and zero padding."""
    parts = []
    length = 0
    for command in commands:
        parts.append(encode_command(command, data))
        length += command_size(command)
    parts.append(bytes([TERMINATOR]))
    parts.append(bytes(_padding(length, alignment)))
    return b"".join(parts)