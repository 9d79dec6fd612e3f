"""Decoder for Adobe/Resolve .cube 3D LUT files."""
import logging
from dataclasses import dataclass, replace
from typing import Tuple

from ..directives import LineKind, ParsedLine, parse_cube_line
from ..errors import DegenerateDomainError, create_error_context
from .base import RGB, DecoderState, LutDecoder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainBounds:
    """Input range that raw .cube samples are remapped from."""
    minimum: RGB = (0.0, 0.0, 0.0)
    maximum: RGB = (1.0, 1.0, 1.0)

    def degenerate_channels(self) -> Tuple[int, ...]:
        """Channels where minimum == maximum."""
        return tuple(c for c in range(3) if self.maximum[c] == self.minimum[c])

    def normalize(self, values: RGB) -> RGB:
        """Map raw samples into [0, 1]; degenerate channels map to 0."""
        out = []
        for c in range(3):
            span = self.maximum[c] - self.minimum[c]
            out.append((values[c] - self.minimum[c]) / span if span else 0.0)
        return tuple(out)


@dataclass(frozen=True)
class CubeState(DecoderState):
    domain: DomainBounds = DomainBounds()
    degenerate_warned: bool = False


def cube_texel(index, size: int):
    """Texel (x, y) for the index-th .cube row: rows fill the image left to right, top to bottom.

    index may be an int or an integer numpy array.
    """
    return index % size, index // size


class CubeLutDecoder(LutDecoder):
    """Decode .cube files into a PackedLutImage.

    Recognizes LUT_3D_SIZE, DOMAIN_MIN, DOMAIN_MAX and TITLE. Samples are
    remapped through the domain bounds before quantization.
    """

    format_name = "cube"

    def parse_line(self, line: str) -> ParsedLine:
        return parse_cube_line(line)

    def texel(self, index, size: int):
        return cube_texel(index, size)

    def initial_state(self) -> CubeState:
        return CubeState()

    def step(self, state: CubeState, parsed: ParsedLine, line_number: int, line: str) -> CubeState:
        kind = parsed.kind

        if kind is LineKind.SIZE:
            return self._declare_size(state, parsed.number, line_number, line)

        if kind is LineKind.DOMAIN_MIN:
            logger.info(f"DOMAIN_MIN {parsed.values[0]} {parsed.values[1]} {parsed.values[2]}")
            return replace(state, domain=replace(state.domain, minimum=parsed.values))

        if kind is LineKind.DOMAIN_MAX:
            logger.info(f"DOMAIN_MAX {parsed.values[0]} {parsed.values[1]} {parsed.values[2]}")
            return replace(state, domain=replace(state.domain, maximum=parsed.values))

        if kind is LineKind.TITLE:
            return replace(state, title=parsed.text)

        if kind is LineKind.DATA:
            return self._consume_row(state, parsed.values, line_number, line)

        return self._reject(state, parsed, line_number, line)

    def _consume_row(self, state: CubeState, values: RGB, line_number: int, line: str) -> CubeState:
        accepted, state = self._accepts_row(state, line_number, line)
        if not accepted:
            return state

        degenerate = state.domain.degenerate_channels()
        if degenerate:
            if self.config.degenerate_domain == "error":
                raise DegenerateDomainError(
                    f"DOMAIN_MIN equals DOMAIN_MAX on channel(s) {list(degenerate)}",
                    context=create_error_context(
                        "normalize",
                        "decode_cube",
                        line_number=line_number,
                        line=line,
                        domain_min=state.domain.minimum,
                        domain_max=state.domain.maximum,
                    ),
                )
            if not state.degenerate_warned:
                logger.warning(
                    f"Degenerate domain on channel(s) {list(degenerate)}, writing 0 for those channels"
                )
                state = replace(state, degenerate_warned=True)

        return self._write_row(state, state.domain.normalize(values))
