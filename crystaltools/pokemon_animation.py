"""Describe animated sprite frames as assembly bitmasks and tile lists."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from crystaltools.common import (
    ToolError,
    UsageError,
    _getopt,
    _read_file,
    _run,
    read_dimensions,
)

PROGRAM = "pokemon_animation"
USAGE = "[-h|--help] [-b|--bitmasks] [-f|--frames] front.animated.tilemap front.dimensions"


@dataclass(frozen=True)
class Frame:
    """The tiles that differ from the first frame, and the bitmask saying where."""

    data: bytes
    bitmask: int


def _bitmask(changed: list[bool]) -> bytes:
    # Tile order ABCDEFGH... becomes byte order %HGFEDCBA
    return bytes(
        sum(1 << bit for bit, flag in enumerate(changed[start : start + 8]) if flag)
        for start in range(0, len(changed), 8)
    )


def make_frames(tilemap: bytes, width: int) -> tuple[list[Frame], list[bytes]]:
    """Split a tilemap into frames and their deduplicated bitmasks."""
    per_frame = width * width
    if per_frame <= 0:
        raise ToolError(f"invalid width: {width}")
    if len(tilemap) < per_frame:
        raise ToolError("tilemap is smaller than one frame")
    first = tilemap[:per_frame]
    end = len(tilemap) // per_frame * per_frame
    frames: list[Frame] = []
    bitmasks: list[bytes] = []
    for start in range(per_frame, end, per_frame):
        frame = tilemap[start : start + per_frame]
        changed = [new != old for new, old in zip(frame, first)]
        data = bytes(tile for tile, flag in zip(frame, changed) if flag)
        mask = _bitmask(changed)
        if mask not in bitmasks:
            bitmasks.append(mask)
        frames.append(Frame(data, bitmasks.index(mask)))
    return frames, bitmasks


def format_frames(frames: list[Frame]) -> str:
    """Render the frame pointer table and frame data as assembly."""
    lines = [f"\tdw .frame{number}" for number in range(1, len(frames) + 1)]
    for number, frame in enumerate(frames, 1):
        lines.append(f".frame{number}")
        lines.append(f"\tdb ${frame.bitmask:02x} ; bitmask")
        for start in range(0, len(frame.data), 12):
            chunk = frame.data[start : start + 12]
            lines.append("\tdb " + ", ".join(f"${tile:02x}" for tile in chunk))
    return "".join(f"{line}\n" for line in lines)


def format_bitmasks(bitmasks: list[bytes]) -> str:
    """Render each bitmask as binary assembly bytes."""
    lines: list[str] = []
    for index, mask in enumerate(bitmasks):
        lines.append(f"; {index}")
        lines.extend(f"\tdb %{byte:08b}" for byte in mask)
    return "".join(f"{line}\n" for line in lines)


def _main(argv: list[str]) -> None:
    opts, args = _getopt(argv, "bfh", ["bitmasks", "frames", "help"])
    use_bitmasks = use_frames = False
    for opt, _ in opts:
        if opt in ("-h", "--help"):
            raise UsageError(0)
        if opt in ("-b", "--bitmasks"):
            use_bitmasks = True
        elif opt in ("-f", "--frames"):
            use_frames = True
    if len(args) < 2:
        raise UsageError(1)
    width = read_dimensions(args[1])
    tilemap = _read_file(args[0])
    frames, bitmasks = make_frames(tilemap, width)
    if use_frames:
        sys.stdout.write(format_frames(frames))
    if use_bitmasks:
        sys.stdout.write(format_bitmasks(bitmasks))
    sys.stdout.flush()


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())