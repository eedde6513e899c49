"""
test_canvas.py
--------------
"""

import numpy as np
import PIL.Image
import pytest

from mandelbrot import SENTINEL_COLOR, Canvas, get_alpha, get_blue, get_green, get_red, make_rgba


def test_make_rgba_packs_channels():
    color = make_rgba(1, 2, 3, 4)
    assert color == 0x01020304
    assert (get_red(color), get_green(color), get_blue(color), get_alpha(color)) == (1, 2, 3, 4)


def test_dimensions_and_pixels():
    canvas = Canvas(5, 3)
    assert (canvas.width, canvas.height) == (5, 3)
    assert canvas.pixels.shape == (3, 5)

    canvas.set_pixel(4, 2, make_rgba(9, 9, 9, 0))
    assert canvas.get_pixel(4, 2) == make_rgba(9, 9, 9, 0)
    assert canvas.get_pixel(0, 0) == 0


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (5, 0), (0, 3)])
def test_out_of_range_pixels_are_rejected(x, y):
    canvas = Canvas(5, 3)
    with pytest.raises(IndexError):
        canvas.set_pixel(x, y, 0)


@pytest.mark.parametrize("width, height", [(0, 3), (3, 0), (-1, 2)])
def test_empty_canvas_is_rejected(width, height):
    with pytest.raises(ValueError):
        Canvas(width, height)


def test_reset_and_read_only_view():
    canvas = Canvas(2, 2)
    canvas.reset(SENTINEL_COLOR)
    assert np.all(canvas.pixels == SENTINEL_COLOR)
    with pytest.raises(ValueError):
        canvas.pixels[0, 0] = 0


def test_rows_view_writes_through():
    canvas = Canvas(3, 4)
    canvas.rows(1, 2)[:] = 7
    assert canvas.get_pixel(0, 0) == 0
    assert canvas.get_pixel(2, 2) == 7
    with pytest.raises(IndexError):
        canvas.rows(3, 2)


def test_rgb_array_drops_alpha():
    canvas = Canvas(1, 1)
    canvas.reset(SENTINEL_COLOR)
    np.testing.assert_array_equal(canvas.to_rgb_array()[0, 0], [0, 0, 255])


def test_save_bmp_round_trips(tmp_path):
    canvas = Canvas(4, 3)
    canvas.set_pixel(1, 2, make_rgba(200, 100, 50, 0))
    path = canvas.save(tmp_path / "out.bmp")

    with PIL.Image.open(path) as image:
        assert image.size == (4, 3)
        assert image.convert("RGB").getpixel((1, 2)) == (200, 100, 50)
        assert image.convert("RGB").getpixel((0, 0)) == (0, 0, 0)


def test_save_into_missing_directory_fails(tmp_path):
    with pytest.raises(OSError):
        Canvas(2, 2).save(tmp_path / "missing" / "out.bmp")


def test_save_unknown_format_fails(tmp_path):
    with pytest.raises(OSError):
        Canvas(2, 2).save(tmp_path / "out.notaformat")
