"""Write the one-byte tile dimensions of a square front sprite."""

from __future__ import annotations

from crystaltools.common import (
    ToolError,
    UsageError,
    _run,
    _write_file,
    read_png_width,
)

PROGRAM = "png_dimensions"
USAGE = "front.png front.dimensions"


def dimensions_byte(width: int, name: str = "") -> int:
    """Encode a pixel width of 40, 48 or 56 as a dimensions byte."""
    if width not in (40, 48, 56):
        raise ToolError(f'Not a valid width for "{name}": {width} px')
    tiles = width // 8
    return (tiles << 4) | tiles


def _main(argv: list[str]) -> None:
    if len(argv) < 2:
        raise UsageError(1)
    value = dimensions_byte(read_png_width(argv[0]), argv[0])
    _write_file(argv[1], bytes([value]))


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())