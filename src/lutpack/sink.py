"""Persisting packed LUT images.

PackedLutImage is written as a lossless RGBA PNG so the 8-bit texels
survive unchanged, and such a PNG can be read back for reuse.
"""
import logging
from pathlib import Path
from typing import Protocol, Union

import numpy as np
from PIL import Image

from .errors import LutReadError, LutWriteError, create_error_context
from .image import PackedLutImage

logger = logging.getLogger(__name__)


class ImageSink(Protocol):
    """Anything that can persist a PackedLutImage."""

    def write(self, image: PackedLutImage, path: Union[str, Path]) -> Path:
        ...


class PngImageSink:
    """Write packed LUT images as PNG files using Pillow."""

    def __init__(self, compress_level: int = 6):
        if not 0 <= compress_level <= 9:
            raise ValueError("compress_level must be between 0 and 9")
        self.compress_level = compress_level

    def write(self, image: PackedLutImage, path: Union[str, Path]) -> Path:
        """Save the image, replacing any existing file at path.

        Raises:
            LutWriteError: If the directory or the file cannot be written
        """
        path = Path(path)
        logger.info(f"saveBitmap start: {path}")

        try:
            if path.exists():
                path.unlink()
            path.parent.mkdir(parents=True, exist_ok=True)

            Image.fromarray(image.pixels).save(
                path, format="PNG", compress_level=self.compress_level
            )
        except OSError as e:
            logger.error(f"Failed to save LUT image {path}: {e}")
            raise LutWriteError(
                f"Failed to write LUT image {path}: {e}",
                context=create_error_context("write", "save_png", input_file=path, size=image.size),
            ) from e

        logger.info(f"Saved {image.width}x{image.height} LUT image to {path}")
        return path


def load_packed_image(path: Union[str, Path]) -> PackedLutImage:
    """Read a packed LUT PNG back into a PackedLutImage.

    Raises:
        LutReadError: If the file cannot be opened or is not N x N^2
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            pixels = np.asarray(img.convert("RGBA"), dtype=np.uint8)
    except OSError as e:
        raise LutReadError(
            f"Failed to read LUT image {path}: {e}",
            context=create_error_context("read", "load_packed_image", input_file=path),
        ) from e

    try:
        return PackedLutImage.from_array(pixels)
    except ValueError as e:
        raise LutReadError(
            f"{path} is not a packed LUT image: {e}",
            context=create_error_context("read", "load_packed_image", input_file=path),
        ) from e
