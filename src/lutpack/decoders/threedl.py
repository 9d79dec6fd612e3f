"""Decoder for Autodesk/Lustre .3dl 3D LUT files."""
import logging
from dataclasses import dataclass, replace

from ..directives import LineKind, ParsedLine, parse_3dl_line
from .base import RGB, DecoderState, LutDecoder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThreeDLState(DecoderState):
    scale: float = 4096.0


def threedl_texel(index, size: int):
    """Texel (x, y) for the index-th .3dl row.

    .3dl files enumerate entries with the first axis changing slowest, so
    consecutive rows walk down the image in steps of one slice (size rows)
    and wrap into the next column once every slice has been visited. index
    may be an int or an integer numpy array.
    """
    square_index = index % size
    in_square_y = (index // size) % size
    in_square_x = index // size // size
    return in_square_x, square_index * size + in_square_y


class ThreeDLLutDecoder(LutDecoder):
    """Decode .3dl files into a PackedLutImage.

    The cube edge length comes from the axis enumeration row, and integer
    samples are divided by 2**bits from the Mesh line (12 bits by default).
    """

    format_name = "3dl"

    def parse_line(self, line: str) -> ParsedLine:
        return parse_3dl_line(line)

    def texel(self, index, size: int):
        return threedl_texel(index, size)

    def initial_state(self) -> ThreeDLState:
        return ThreeDLState(scale=self.config.default_mesh_scale)

    def step(self, state: ThreeDLState, parsed: ParsedLine, line_number: int, line: str) -> ThreeDLState:
        kind = parsed.kind

        if kind is LineKind.MESH:
            scale = float(2 ** parsed.number)
            logger.info(f"Mesh scale: {scale} bits: {parsed.number}")
            return replace(state, scale=scale)

        if kind is LineKind.DIMENSION:
            return self._declare_size(state, parsed.number, line_number, line)

        if kind is LineKind.DATA:
            return self._consume_row(state, parsed.values, line_number, line)

        return self._reject(state, parsed, line_number, line)

    def _consume_row(self, state: ThreeDLState, values: RGB, line_number: int, line: str) -> ThreeDLState:
        accepted, state = self._accepts_row(state, line_number, line)
        if not accepted:
            return state

        return self._write_row(state, tuple(v / state.scale for v in values))
