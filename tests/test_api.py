import io
import struct

import pytest

from bgkit.imago import api
from bgkit.imago.formats import ImageError, PixelFormat
from bgkit.imago.pixmap import Pixmap

RGB_PIXELS = bytes([255, 0, 0, 0, 255, 0, 0, 0, 255, 255, 255, 255])


def test_registry_order_and_sharing():
    registry = api.default_registry()
    assert [ft.name for ft in registry] == ["tga", "rgbe", "ppm", "png", "lbm", "jpeg"]
    assert api.default_registry() is registry


def test_registry_guesses_by_suffix():
    registry = api.default_registry()
    assert registry.guess_format("photo.jpeg").name == "jpeg"
    assert registry.guess_format("sky.hdr").name == "rgbe"
    assert registry.guess_format("noext") is None


def test_read_detects_ppm():
    data = b"P6\n2 1\n255\n" + bytes([255, 0, 0, 0, 255, 0])
    pm = api.read(io.BytesIO(data))
    assert pm.fmt == PixelFormat.RGB24
    assert (pm.width, pm.height) == (2, 1)
    assert bytes(pm.pixels) == bytes([255, 0, 0, 0, 255, 0])


def test_read_detects_pgm():
    data = b"P5\n3 1\n255\n" + bytes([1, 2, 3])
    pm = api.read(io.BytesIO(data))
    assert pm.fmt == PixelFormat.GREY8
    assert bytes(pm.pixels) == bytes([1, 2, 3])


def test_read_unknown_data_raises():
    with pytest.raises(ImageError):
        api.read(io.BytesIO(b"hello world, not an image"))


def test_write_without_name_uses_first_type():
    pm = Pixmap(2, 2, PixelFormat.RGB24, RGB_PIXELS)
    with pytest.raises(ImageError):
        api.write(pm, io.BytesIO())


def test_write_by_name_suffix():
    pm = Pixmap(2, 2, PixelFormat.RGB24, RGB_PIXELS, name="out.ppm")
    out = io.BytesIO()
    api.write(pm, out)
    assert out.getvalue().startswith(b"P6\n")
    out.seek(0)
    assert bytes(api.read(out).pixels) == RGB_PIXELS


def test_save_sets_name_and_round_trips_ppm(tmp_path):
    path = tmp_path / "img.ppm"
    pm = Pixmap(2, 2, PixelFormat.RGB24, RGB_PIXELS)
    api.save(pm, path)
    assert pm.name == str(path)
    loaded = api.load(path)
    assert loaded.fmt == PixelFormat.RGB24
    assert bytes(loaded.pixels) == RGB_PIXELS


def test_png_round_trip(tmp_path):
    path = tmp_path / "img.png"
    pm = Pixmap(2, 2, PixelFormat.RGB24, RGB_PIXELS)
    api.save(pm, path)
    loaded = api.load(path)
    assert loaded.fmt == PixelFormat.RGB24
    assert (loaded.width, loaded.height) == (2, 2)
    assert bytes(loaded.pixels) == RGB_PIXELS


def test_rgbe_round_trip(tmp_path):
    path = tmp_path / "img.hdr"
    values = [0.5, 0.25, 1.0, 1.0, 0.5, 0.25]
    pm = Pixmap(2, 1, PixelFormat.RGBF, struct.pack("<6f", *values))
    api.save(pm, path)
    loaded = api.load(path)
    assert loaded.fmt == PixelFormat.RGBF
    assert list(struct.unpack("<6f", bytes(loaded.pixels))) == values


def test_jpeg_round_trip_keeps_size(tmp_path):
    path = tmp_path / "img.jpg"
    pm = Pixmap(4, 3, PixelFormat.RGB24, bytes([200, 100, 50]) * 12)
    api.save(pm, path)
    loaded = api.load(path)
    assert loaded.fmt == PixelFormat.RGB24
    assert (loaded.width, loaded.height) == (4, 3)
    assert len(loaded.pixels) == 4 * 3 * 3


def test_load_pixels_converts_format(tmp_path):
    path = tmp_path / "img.ppm"
    api.save(Pixmap(2, 2, PixelFormat.RGB24, RGB_PIXELS), path)
    pixels, width, height = api.load_pixels(path)
    assert (width, height) == (2, 2)
    assert len(pixels) == 16
    assert set(pixels[3::4]) == {255}
    rgb = bytes(b for i, b in enumerate(pixels) if i % 4 != 3)
    assert rgb == RGB_PIXELS


def test_save_pixels_load_pixels_round_trip(tmp_path):
    path = tmp_path / "raw.ppm"
    api.save_pixels(path, RGB_PIXELS, 2, 2, PixelFormat.RGB24)
    pixels, width, height = api.load_pixels(path, PixelFormat.RGB24)
    assert (pixels, width, height) == (RGB_PIXELS, 2, 2)


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        api.load(tmp_path / "missing.png")