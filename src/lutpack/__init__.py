"""lutpack - decode .cube and .3dl 3D LUTs into packed LUT textures."""
__version__ = "0.1.0"

from .config import DecoderConfig
from .image import PackedLutImage, quantize
from .router import LutFormat, decode_file, get_decoder
from .sink import ImageSink, PngImageSink, load_packed_image

from .decoders import (
    CubeLutDecoder,
    ThreeDLLutDecoder,
    DecodeResult,
    DomainBounds,
)

from .errors import (
    LutError,
    FatalError,
    UnsupportedFormatError,
    LutReadError,
    LutWriteError,
    DegenerateDomainError,
    LutSizeLimitError,
    ConfigurationError,
    ErrorContext,
    DecodeIssue,
    IssueKind,
)

__all__ = [
    "__version__",
    "DecoderConfig",
    "PackedLutImage",
    "quantize",
    "LutFormat",
    "decode_file",
    "get_decoder",
    "ImageSink",
    "PngImageSink",
    "load_packed_image",
    "CubeLutDecoder",
    "ThreeDLLutDecoder",
    "DecodeResult",
    "DomainBounds",
    "LutError",
    "FatalError",
    "UnsupportedFormatError",
    "LutReadError",
    "LutWriteError",
    "DegenerateDomainError",
    "LutSizeLimitError",
    "ConfigurationError",
    "ErrorContext",
    "DecodeIssue",
    "IssueKind",
]
