"""Shared errors, command-line plumbing and small file-format readers."""

from __future__ import annotations

import getopt
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

PNG_HEADER = b"\x89PNG\r\n\x1a\n\x00\x00\x00\x0dIHDR"
VALID_DIMENSIONS = (5, 6, 7)


class ToolError(Exception):
    """A fatal error reported by one of the tools."""


class UsageError(Exception):
    """The command line was malformed, or help was requested."""

    def __init__(self, status: int = 1) -> None:
        super().__init__(status)
        self.status = status


def _read_file(path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc


def _write_file(path, data: bytes) -> None:
    try:
        Path(path).write_bytes(data)
    except OSError as exc:
        raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc


def _getopt(argv: Sequence[str], shortopts: str, longopts: list[str]):
    try:
        return getopt.gnu_getopt(list(argv), shortopts, longopts)
    except getopt.GetoptError as exc:
        print(f"{exc}", file=sys.stderr)
        raise UsageError(1) from exc


def _run(program: str, usage: str, body: Callable[[list[str]], None], argv) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        body(args)
    except UsageError as exc:
        print(f"Usage: {program} {usage}", file=sys.stderr)
        return exc.status
    except ToolError as exc:
        print(f"{program}: {exc}", file=sys.stderr)
        return 1
    return 0


def png_width(data: bytes, name: str) -> int:
    """Return the pixel width stored in the IHDR chunk of PNG data."""
    if len(data) < len(PNG_HEADER):
        raise ToolError(f'Could not read from file "{name}"')
    if data[: len(PNG_HEADER)] != PNG_HEADER:
        raise ToolError(f'Not a valid PNG file: "{name}"')
    field = data[len(PNG_HEADER) : len(PNG_HEADER) + 4]
    if len(field) < 4:
        raise ToolError(f'Could not read from file "{name}"')
    return int.from_bytes(field, "big")


def read_png_width(path) -> int:
    """Read a PNG file and return its pixel width."""
    return png_width(_read_file(path), str(path))


def parse_dimensions(data: bytes, name: str) -> int:
    """Decode a one-byte dimensions file and return the square size in tiles."""
    if len(data) != 1:
        raise ToolError(f"{name}: invalid dimensions file")
    width = data[0] & 0xF
    height = data[0] >> 4
    if width != height or width not in VALID_DIMENSIONS:
        raise ToolError(f"{name}: invalid dimensions: {width}x{height} tiles")
    return width


def read_dimensions(path) -> int:
    """Read a dimensions file and return the square size in tiles."""
    return parse_dimensions(_read_file(path), str(path))