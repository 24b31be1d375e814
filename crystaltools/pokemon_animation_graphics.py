"""Build the deduplicated graphics and tilemap of an animated front sprite."""

from __future__ import annotations

from crystaltools.common import (
    ToolError,
    UsageError,
    _getopt,
    _read_file,
    _run,
    _write_file,
    read_dimensions,
)

PROGRAM = "pokemon_animation_graphics"
USAGE = (
    "[-h|--help] [-o|--output front.animated.2bpp] "
    "[-t|--tilemap front.animated.tilemap] [--girafarig] front.2bpp front.dimensions"
)

TILE_SIZE = 16


def _split(data: bytes) -> list[bytes]:
    return [bytes(data[i : i + TILE_SIZE]) for i in range(0, len(data), TILE_SIZE)]


def transpose_tiles(tiles: bytes, width: int) -> bytes:
    """Turn one column-major square frame into row-major order."""
    size = len(tiles)
    if width <= 0 or size != width * width * TILE_SIZE:
        raise ToolError(f"frame is not {width}x{width} tiles")
    out = bytearray(size)
    for index, tile in enumerate(_split(tiles)):
        j = index * width * TILE_SIZE
        dest = (j // size) * TILE_SIZE + j % size
        out[dest : dest + TILE_SIZE] = tile
    return bytes(out)


def get_tile_index(tile: bytes, tiles: list[bytes], preferred: int = -1) -> int | None:
    """Find tile among tiles, trying the preferred index first."""
    if 0 <= preferred < len(tiles) and tiles[preferred] == tile:
        return preferred
    try:
        return tiles.index(tile)
    except ValueError:
        return None


def read_tiles(data: bytes, width: int, name: str = "") -> bytes:
    """Validate 2bpp frame data and transpose every frame."""
    frame_size = width * width * TILE_SIZE
    if not data:
        raise ToolError(f"{name}: empty file")
    if len(data) % TILE_SIZE:
        raise ToolError(f"{name}: not divisible into 8x8-px 2bpp tiles")
    if len(data) % frame_size:
        raise ToolError(f"{name}: not divisible into {width}x{width}-tile frames")
    return b"".join(
        transpose_tiles(data[start : start + frame_size], width)
        for start in range(0, len(data), frame_size)
    )


def make_graphics(tiles: bytes, tiles_per_frame: int, girafarig: bool = False) -> bytes:
    """Return the first frame followed by each new tile of the later frames."""
    all_tiles = _split(tiles)
    out = all_tiles[:tiles_per_frame]
    for index in range(tiles_per_frame, len(all_tiles)):
        tile = all_tiles[index]
        if get_tile_index(tile, out, index % tiles_per_frame) is None:
            out.append(tile)
    if girafarig:
        # A duplicate of tile 0 goes at the end
        out.append(all_tiles[0])
    return b"".join(out)


def make_tilemap(tiles: bytes, tiles_per_frame: int, girafarig: bool = False) -> bytes:
    """Return the graphics tile id used at each tile position of every frame."""
    all_tiles = _split(tiles)
    tilemap = list(range(min(tiles_per_frame, len(all_tiles))))
    next_tile = tiles_per_frame
    for index in range(tiles_per_frame, len(all_tiles)):
        found = get_tile_index(all_tiles[index], all_tiles[:index], index % tiles_per_frame)
        if girafarig and found == 0:
            tile = next_tile
        elif found is None:
            tile = next_tile
            next_tile += 1
        else:
            tile = tilemap[found]
        tilemap.append(tile)
    return bytes(tile & 0xFF for tile in tilemap)


def _main(argv: list[str]) -> None:
    opts, args = _getopt(argv, "o:t:h", ["output=", "tilemap=", "girafarig", "help"])
    out_filename = map_filename = None
    girafarig = False
    for opt, value in opts:
        if opt in ("-h", "--help"):
            raise UsageError(0)
        if opt in ("-o", "--output"):
            out_filename = value
        elif opt in ("-t", "--tilemap"):
            map_filename = value
        elif opt == "--girafarig":
            girafarig = True
    if len(args) < 2:
        raise UsageError(1)
    width = read_dimensions(args[1])
    tiles = read_tiles(_read_file(args[0]), width, args[0])
    if out_filename:
        _write_file(out_filename, make_graphics(tiles, width * width, girafarig))
    if map_filename:
        _write_file(map_filename, make_tilemap(tiles, width * width, girafarig))


def main(argv=None) -> int:
    return _run(PROGRAM, USAGE, _main, argv)


if __name__ == "__main__":
    raise SystemExit(main())