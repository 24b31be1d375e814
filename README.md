# crystaltools

Command-line tools and a Python library for the build of a Game Boy Color
ROM project. They merge palettes, measure and animate front pictures, track
assembly dependencies, write Virtual Console patch files, and build, encode
and decode command streams in the game's LZ format.

Only the standard library is needed; Python 3.10 or later.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Commands

Each command prints its usage line on standard error and exits with status 1
when its arguments are wrong, or status 0 for `-h`/`--help`. Other errors are
printed as `<command>: <message>` and exit with status 1.

### gbcpal

Merges one or more `.gbcpal` palettes into a single four-colour palette:
white, the two remaining colours sorted lightest to darkest, and black.
Black, white and repeated neighbouring colours are dropped before the
two middle colours are chosen.

```
gbcpal [-h|--help] [-r|--reverse] out.gbcpal in.gbcpal...
```

`--reverse` sorts the middle colours darkest to lightest. More than two
colours besides black and white is an error.

### png_dimensions

Writes a one-byte `.dimensions` file for a 40, 48 or 56 pixel wide
front picture.

```
png_dimensions front.png front.dimensions
```

### scan_includes

Prints every file named by `INCLUDE` or `INCBIN` in an assembly file,
separated by spaces, following `INCLUDE`s recursively. Comments and string
literals are skipped.

```
scan_includes [-h|--help] [-s|--strict] filename.asm
```

Without `--strict`, an included file that cannot be opened is passed over;
with it, that is an error.

### pokemon_animation_graphics

Builds the animated graphics and tilemap of a front picture from its `.2bpp`
frames and `.dimensions` file. The graphics hold the first frame followed by
each tile of the later frames that is not already present; the tilemap gives
the graphics tile used at each position of every frame.

```
pokemon_animation_graphics [-h|--help] [-o|--output front.animated.2bpp]
    [-t|--tilemap front.animated.tilemap] [--girafarig]
    front.2bpp front.dimensions
```

`--girafarig` appends a copy of tile 0 to the graphics and points the
tilemap's repeats of tile 0 at it.

### pokemon_animation

Writes the frame and bitmask assembly for an animated tilemap to standard
output.

```
pokemon_animation [-h|--help] [-b|--bitmasks] [-f|--frames]
    front.animated.tilemap front.dimensions
```

### make_patch

Fills in a Virtual Console patch template from a symbol file and the
patched and original ROMs, and warns on standard error about differences
the patch does not account for.

```
make_patch values.sym patched.gbc original.gbc vc.patch.template vc.patch
```

Template commands are written in braces: `patch`, `dws`, `db` and the `hex`
family, in lower or upper case and with the `_` and `/` variants. Patch
labels are written in square brackets and must have a matching `.VC_` symbol.

## Library use

Each command is backed by functions that work on bytes and return values:
for example `crystaltools.gbcpal.merge_palettes`,
`crystaltools.png_dimensions.dimensions_byte`,
`crystaltools.scan_includes.scan_text`,
`crystaltools.pokemon_animation.make_frames`,
`crystaltools.pokemon_animation_graphics.make_graphics` and
`crystaltools.make_patch.process_template`.

The `crystaltools.lz` package works with LZ command streams:

* `commands`: the `Command` type, the format's limits and `command_size`
* `spcomp.try_compress_single_pass`: the single-pass compressor (flags 0–71)
* `nullcomp.store_uncompressed`: literal commands only (flags 0–1)
* `repcomp.try_compress_repetitions`: repetition commands only (flags 0–5)
* `packing.optimize` and `packing.repack`: merge neighbouring commands
* `output.encode_commands` and `output.format_commands_text`: write a
  stream as binary or as assembly text, with alignment padding
* `uncomp.get_commands_from_file` and `uncomp.get_uncompressed_data`:
  read a binary stream back and rebuild the data

```python
from crystaltools.lz.output import encode_commands
from crystaltools.lz.spcomp import try_compress_single_pass
from crystaltools.lz.uncomp import get_commands_from_file, get_uncompressed_data

data = bytes(range(16)) * 8
commands = try_compress_single_pass(data, None, 0)
packed = encode_commands(commands, data, 0)

decoded, _slack = get_commands_from_file(packed)
assert get_uncompressed_data(decoded, packed) == data
```

Errors raise `crystaltools.common.ToolError`, or
`crystaltools.lz.commands.LzError` in the LZ package.

## What this package does not do

* There is no command-line LZ compressor. Compression is available only
  through the library functions above, one compressor and one flags value
  at a time; there is no multi-pass compressor and no search across all
  methods for the smallest result.
* There is no tool for post-processing `.1bpp`/`.2bpp` tile data (trimming
  or removing blank, duplicate or flipped tiles, or interleaving).
* There is no tool for writing the Stadium checksums or the global checksum
  into a ROM.