"""Packed 2D representation of a 3D color lookup table.

A cube of edge length N is stored as an image N texels wide and N*N texels
tall, one 8-bit RGBA texel per table entry with alpha fixed at 255.
"""
from typing import Sequence, Tuple

import numpy as np

from .config import QuantizationRule

RGB = Tuple[float, float, float]


def quantize(values: Sequence[float], rule: QuantizationRule = "nearest") -> np.ndarray:
    """Quantize [0, 1] channel values to uint8.

    Values are clamped to [0, 1] first. 'nearest' rounds half up
    (127.5 -> 128), 'truncate' drops the fraction.
    """
    scaled = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0) * 255.0
    if rule == "nearest":
        scaled = np.floor(scaled + 0.5)
    else:
        scaled = np.floor(scaled)
    return scaled.astype(np.uint8)


class PackedLutImage:
    """Grid of quantized texels encoding an unwrapped lookup cube.

    Texels are addressed as (x, y) with 0 <= x < size and 0 <= y < size**2.
    The backing array has shape (height, width, 4).
    """

    def __init__(self, size: int, quantization: QuantizationRule = "nearest"):
        if size < 1:
            raise ValueError(f"LUT size must be positive, got {size}")
        self.size = size
        self.quantization = quantization
        self.pixels = np.zeros((size * size, size, 4), dtype=np.uint8)
        self.pixels[..., 3] = 255

    @classmethod
    def from_array(cls, pixels: np.ndarray, quantization: QuantizationRule = "nearest") -> "PackedLutImage":
        """Wrap an existing (N*N, N, 3|4) uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) array, got shape {pixels.shape}")
        height, width = pixels.shape[:2]
        if height != width * width:
            raise ValueError(f"Packed LUT must be N x N^2, got {width}x{height}")

        image = cls(width, quantization)
        image.pixels[..., :3] = pixels[..., :3]
        return image

    @property
    def width(self) -> int:
        return self.size

    @property
    def height(self) -> int:
        return self.size * self.size

    @property
    def shape(self) -> Tuple[int, int]:
        """(width, height) in texels."""
        return (self.width, self.height)

    def set_texel(self, x: int, y: int, rgb: RGB) -> None:
        """Quantize a normalized RGB triple and store it at (x, y)."""
        self.pixels[y, x, :3] = quantize(rgb, self.quantization)

    def set_texels(self, xs: np.ndarray, ys: np.ndarray, rgb: np.ndarray) -> None:
        """Quantize a (count, 3) block of normalized rows and scatter it to (xs, ys)."""
        self.pixels[ys, xs, :3] = quantize(rgb, self.quantization)

    def get_texel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self.pixels[y, x, :3]
        return (int(r), int(g), int(b))

    def rgb(self) -> np.ndarray:
        """Copy of the color channels without alpha."""
        return self.pixels[..., :3].copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackedLutImage):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"PackedLutImage(size={self.size}, {self.width}x{self.height})"
