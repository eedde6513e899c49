"""Packed-color raster used as the shared render target."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import PIL.Image


def make_rgba(r: int, g: int, b: int, a: int) -> int:
    """Pack four 8-bit channels into a single 32-bit color."""

    return ((int(r) & 0xFF) << 24) | ((int(g) & 0xFF) << 16) | ((int(b) & 0xFF) << 8) | (int(a) & 0xFF)


def get_red(color: int) -> int:
    return (int(color) >> 24) & 0xFF


def get_green(color: int) -> int:
    return (int(color) >> 16) & 0xFF


def get_blue(color: int) -> int:
    return (int(color) >> 8) & 0xFF


def get_alpha(color: int) -> int:
    return int(color) & 0xFF


# Dark blue, used to spot pixels no worker has written.
SENTINEL_COLOR = make_rgba(0, 0, 255, 0)


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


class Canvas:
    """A ``width`` x ``height`` grid of packed RGBA cells.

    Cells are stored row-major in a ``uint32`` array. Writers that own
    disjoint rows may update the grid concurrently without locking.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"canvas dimensions must be positive, got {width}x{height}")
        self._pixels = np.zeros((int(height), int(width)), dtype=np.uint32)

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the packed colors, indexed ``[row, column]``."""

        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def reset(self, color: int) -> None:
        self._pixels.fill(np.uint32(color))

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} canvas")

    def set_pixel(self, x: int, y: int, color: int) -> None:
        self._check_bounds(x, y)
        self._pixels[y, x] = color

    def get_pixel(self, x: int, y: int) -> int:
        self._check_bounds(x, y)
        return int(self._pixels[y, x])

    def rows(self, row_start: int, row_count: int) -> np.ndarray:
        """Writable view of ``row_count`` rows starting at ``row_start``."""

        if row_start < 0 or row_count < 0 or row_start + row_count > self.height:
            raise IndexError(f"rows [{row_start}, {row_start + row_count}) outside canvas of height {self.height}")
        return self._pixels[row_start:row_start + row_count]

    def to_rgb_array(self) -> np.ndarray:
        """Unpack the grid into an ``(height, width, 3)`` ``uint8`` array.

        The alpha channel is not serialized; colors are treated as opaque.
        """

        packed = self._pixels
        rgb = np.empty(packed.shape + (3,), dtype=np.uint8)
        rgb[..., 0] = (packed >> 24) & 0xFF
        rgb[..., 1] = (packed >> 16) & 0xFF
        rgb[..., 2] = (packed >> 8) & 0xFF
        return rgb

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self.to_rgb_array())

    def save(self, path: str | Path, image_format: str | None = None) -> Path:
        """Write the canvas to ``path``; the format defaults to the file extension.

        Raises ``OSError`` when the file cannot be written.
        """

        output_path = Path(path)
        ext = image_format or output_path.suffix.lstrip(".") or "bmp"
        try:
            self.to_image().save(str(output_path), format=_pil_format_name(ext))
        except (KeyError, ValueError) as exc:
            # Pillow reports unknown formats with KeyError/ValueError.
            raise OSError(f"unsupported image format {ext!r} for {output_path}") from exc
        return output_path
