import pytest

from crystaltools.common import PNG_HEADER, ToolError, parse_dimensions
from crystaltools.png_dimensions import dimensions_byte, main


@pytest.mark.parametrize("width,expected", [(40, 0x55), (48, 0x66), (56, 0x77)])
def test_dimensions_byte(width, expected):
    assert dimensions_byte(width, "f.png") == expected


@pytest.mark.parametrize("width", [40, 48, 56])
def test_round_trip_with_parse(width):
    assert parse_dimensions(bytes([dimensions_byte(width)]), "d") * 8 == width


@pytest.mark.parametrize("width", [0, 8, 41, 64])
def test_invalid_width(width):
    with pytest.raises(ToolError, match="Not a valid width"):
        dimensions_byte(width, "f.png")


def test_main_writes_byte(tmp_path):
    png = tmp_path / "front.png"
    out = tmp_path / "front.dimensions"
    png.write_bytes(PNG_HEADER + (48).to_bytes(4, "big") + (48).to_bytes(4, "big"))
    assert main([str(png), str(out)]) == 0
    assert out.read_bytes() == b"\x66"


def test_main_bad_width(tmp_path, capsys):
    png = tmp_path / "front.png"
    png.write_bytes(PNG_HEADER + (16).to_bytes(4, "big"))
    assert main([str(png), str(tmp_path / "out")]) == 1
    assert "png_dimensions: Not a valid width" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_main_usage():
    assert main(["front.png"]) == 1