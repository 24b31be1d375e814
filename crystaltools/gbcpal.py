"""Merge Game Boy Color palettes into a single four-color palette."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from crystaltools.common import (
    ToolError,
    UsageError,
    _getopt,
    _read_file,
    _run,
    _write_file,
)

PROGRAM = "gbcpal"
USAGE = "[-h|--help] [-r|--reverse] out.gbcpal in.gbcpal..."


@dataclass(frozen=True)
class Color:
    """A 15-bit RGB color with 5-bit channels."""

    r: int
    g: int
    b: int

    def pack(self) -> int:
        return (self.b << 10) | (self.g << 5) | self.r

    def luminance(self) -> float:
        return 0.299 * self.r + 0.587 * self.g + 0.114 * self.b


BLACK = Color(0, 0, 0)
WHITE = Color(31, 31, 31)


def unpack_color(value: int) -> Color:
    """Decode a packed 15-bit color."""
    return Color(value & 0x1F, (value >> 5) & 0x1F, (value >> 10) & 0x1F)


def read_gbcpal(data: bytes, name: str) -> list[Color]:
    """Decode the little-endian colors of a gbcpal file."""
    if not data:
        raise ToolError(f"{name}: empty gbcpal file")
    if len(data) % 2:
        raise ToolError(f"{name}: invalid gbcpal file")
    return [
        unpack_color(int.from_bytes(data[i : i + 2], "little"))
        for i in range(0, len(data), 2)
    ]


def sort_colors(colors: Iterable[Color], reverse: bool = False) -> list[Color]:
    """Sort lightest to darkest, or darkest to lightest if reversed."""
    return sorted(colors, key=Color.luminance, reverse=not reverse)


def filter_colors(colors: Iterable[Color]) -> list[Color]:
    """Drop black, white and colors equal to the previously kept one."""
    kept: list[Color] = []
    for color in colors:
        if color in (BLACK, WHITE):
            continue
        if kept and kept[-1] == color:
            continue
        kept.append(color)
    return kept


def merge_palettes(palettes: Iterable[Iterable[Color]], reverse: bool = False, name: str = "") -> bytes:
    """Combine palettes into the bytes of one white/light/dark/black palette."""
    colors = filter_colors(sort_colors((c for p in palettes for c in p), reverse))
    if len(colors) > 2:
        raise ToolError(f"{name}: more than 2 colors besides black and white ({len(colors)})")
    light = colors[0] if colors else WHITE
    if len(colors) > 1:
        dark = colors[1]
    elif colors:
        dark = colors[0]
    else:
        dark = BLACK
    return b"".join(c.pack().to_bytes(2, "little") for c in (WHITE, light, dark, BLACK))


def _main(argv: list[str]) -> None:
    opts, args = _getopt(argv, "rh", ["reverse", "help"])
    reverse = False
    for opt, _ in opts:
        if opt in ("-h", "--help"):
            raise UsageError(0)
        reverse = True
    if len(args) < 2:
        raise UsageError(1)
    out, *inputs = args
    palettes = [read_gbcpal(_read_file(path), path) for path in inputs]
    _write_file(out, merge_palettes(palettes, reverse, out))


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())