"""LUT decoders for the supported text formats."""

from .base import DecodePhase, DecodeResult, DecoderState, LutDecoder
from .cube import CubeLutDecoder, DomainBounds, cube_texel
from .threedl import ThreeDLLutDecoder, threedl_texel

__all__ = [
    "DecodePhase",
    "DecodeResult",
    "DecoderState",
    "LutDecoder",
    "CubeLutDecoder",
    "DomainBounds",
    "cube_texel",
    "ThreeDLLutDecoder",
    "threedl_texel",
]
