import pytest
from hypothesis import given
from hypothesis import strategies as st

from crystaltools.common import ToolError
from crystaltools.pokemon_animation_graphics import (
    get_tile_index,
    main,
    make_graphics,
    make_tilemap,
    read_tiles,
    transpose_tiles,
)

A = bytes([1]) * 16
B = bytes([2]) * 16
C = bytes([3]) * 16
D = bytes([4]) * 16
E = bytes([5]) * 16

frame_data = st.integers(1, 4).flatmap(
    lambda count: st.lists(st.sampled_from([A, B, C, D, E]), min_size=4 * count, max_size=4 * count)
)


def test_transpose_tiles_swaps_rows_and_columns():
    assert transpose_tiles(A + B + C + D, 2) == A + C + B + D


@given(st.sampled_from([2, 3]).flatmap(lambda w: st.tuples(st.just(w), st.binary(min_size=w * w * 16, max_size=w * w * 16))))
def test_transpose_is_an_involution(case):
    width, data = case
    assert transpose_tiles(transpose_tiles(data, width), width) == data


def test_transpose_rejects_wrong_size():
    with pytest.raises(ToolError):
        transpose_tiles(A + B, 2)


def test_get_tile_index():
    tiles = [A, B, A]
    assert get_tile_index(A, tiles, 2) == 2
    assert get_tile_index(A, tiles, 1) == 0
    assert get_tile_index(A, tiles, 5) == 0
    assert get_tile_index(C, tiles, 0) is None


def test_read_tiles_transposes_each_frame():
    assert read_tiles(A + B + C + D, 2, "front.2bpp") == A + C + B + D


@pytest.mark.parametrize(
    ("data", "message"),
    [(b"", "empty"), (bytes(17), "8x8"), (bytes(80), "2x2")],
)
def test_read_tiles_errors(data, message):
    with pytest.raises(ToolError, match=message):
        read_tiles(data, 2, "front.2bpp")


def test_make_graphics_appends_new_tiles():
    tiles = A + B + C + D + A + E + C + D
    assert make_graphics(tiles, 4) == A + B + C + D + E
    assert make_graphics(tiles, 4, girafarig=True) == A + B + C + D + E + A


def test_make_graphics_copies_first_frame_verbatim():
    assert make_graphics(A + A + C + D, 4) == A + A + C + D


def test_make_tilemap():
    tiles = A + B + C + D + A + E + C + D
    assert make_tilemap(tiles, 4) == bytes([0, 1, 2, 3, 0, 4, 2, 3])
    assert make_tilemap(tiles, 4, girafarig=True) == bytes([0, 1, 2, 3, 4, 4, 2, 3])


@given(frame_data)
def test_tilemap_points_at_matching_graphics(tiles):
    data = b"".join(tiles)
    graphics = make_graphics(data, 4)
    tilemap = make_tilemap(data, 4)
    assert len(tilemap) == len(tiles)
    assert len(graphics) // 16 == max(tilemap) + 1
    for tile, index in zip(tiles, tilemap):
        assert graphics[index * 16 : index * 16 + 16] == tile


def test_main_writes_graphics_and_tilemap(tmp_path):
    src = tmp_path / "front.2bpp"
    dims = tmp_path / "front.dimensions"
    gfx_out = tmp_path / "front.animated.2bpp"
    map_out = tmp_path / "front.animated.tilemap"
    frame = b"".join(bytes([k]) * 16 for k in range(1, 26))
    src.write_bytes(frame + frame)
    dims.write_bytes(b"\x55")
    argv = ["-o", str(gfx_out), "-t", str(map_out), str(src), str(dims)]
    assert main(argv) == 0
    assert gfx_out.read_bytes() == read_tiles(frame, 5, "front.2bpp")
    assert map_out.read_bytes() == bytes(range(25)) * 2


def test_main_reports_bad_input(tmp_path):
    src = tmp_path / "front.2bpp"
    dims = tmp_path / "front.dimensions"
    src.write_bytes(bytes(17))
    dims.write_bytes(b"\x55")
    assert main(["-o", str(tmp_path / "out"), str(src), str(dims)]) == 1
    assert main([str(src)]) == 1