"""Format detection and dispatch to the matching LUT decoder."""
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .config import DecoderConfig
from .decoders import CubeLutDecoder, DecodeResult, LutDecoder, ThreeDLLutDecoder
from .errors import UnsupportedFormatError, create_error_context

logger = logging.getLogger(__name__)


class LutFormat(Enum):
    """Supported LUT formats."""
    CUBE = "cube"      # Adobe/Resolve .cube
    THREEDL = "3dl"    # Autodesk .3dl
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LutFormat":
        """Resolve the format from the suffix after the last '.' of the file name."""
        name = Path(path).name
        _, dot, suffix = name.rpartition(".")
        if not dot:
            return cls.UNSUPPORTED

        suffix = suffix.lower()
        for fmt in (cls.CUBE, cls.THREEDL):
            if suffix == fmt.value:
                return fmt
        return cls.UNSUPPORTED


def get_file_suffix(path: Union[str, Path]) -> str:
    """Suffix after the last '.' of the file name, or '' if there is none."""
    name = Path(path).name
    _, dot, suffix = name.rpartition(".")
    return suffix if dot else ""


def get_decoder(fmt: LutFormat, config: Optional[DecoderConfig] = None) -> LutDecoder:
    """Create the decoder for a resolved format.

    Raises:
        UnsupportedFormatError: For LutFormat.UNSUPPORTED
    """
    if fmt is LutFormat.CUBE:
        return CubeLutDecoder(config)
    if fmt is LutFormat.THREEDL:
        return ThreeDLLutDecoder(config)
    raise UnsupportedFormatError(f"Unsupported LUT format: {fmt.value}")


def decode_file(path: Union[str, Path], config: Optional[DecoderConfig] = None) -> DecodeResult:
    """Decode a .cube or .3dl file, choosing the decoder from its extension.

    Raises:
        UnsupportedFormatError: If the extension is neither .cube nor .3dl
        LutReadError: If the file cannot be read
    """
    fmt = LutFormat.from_path(path)
    if fmt is LutFormat.UNSUPPORTED:
        logger.error(f"not support format: {path}")
        raise UnsupportedFormatError(
            f"Unsupported LUT format '{get_file_suffix(path) or '(none)'}' for {path}, "
            "expected .cube or .3dl",
            context=create_error_context("detect", "decode_file", input_file=path),
        )

    return get_decoder(fmt, config).decode(path)
