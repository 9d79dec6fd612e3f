"""Line classification for .cube and .3dl LUT files.

Each line is turned into a ParsedLine describing what it is (skippable,
a directive, a data row, or something the decoder should report) without
touching any decoder state.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class LineKind(Enum):
    """What a single input line represents."""
    SKIP = "skip"                  # comment or blank
    SIZE = "size"                  # .cube LUT_3D_SIZE
    DOMAIN_MIN = "domain_min"      # .cube DOMAIN_MIN
    DOMAIN_MAX = "domain_max"      # .cube DOMAIN_MAX
    TITLE = "title"                # .cube TITLE
    MESH = "mesh"                  # .3dl Mesh <unused> <bits>
    DIMENSION = "dimension"        # .3dl axis enumeration row
    DATA = "data"                  # three numeric samples
    MALFORMED = "malformed"        # known keyword, bad arguments
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ParsedLine:
    """Classification of one line plus whatever values it carries."""
    kind: LineKind
    values: Tuple[float, ...] = ()
    number: Optional[int] = None
    text: Optional[str] = None
    reason: str = ""


SKIPPED = ParsedLine(LineKind.SKIP)

CUBE_SIZE_KEYWORD = "LUT_3D_SIZE"
CUBE_DOMAIN_KEYWORDS = {
    "DOMAIN_MIN": LineKind.DOMAIN_MIN,
    "DOMAIN_MAX": LineKind.DOMAIN_MAX,
}
CUBE_TITLE_KEYWORD = "TITLE"
MESH_KEYWORD = "MESH"
MESH_BITS_POSITION = 2


def tokenize(line: str) -> Optional[List[str]]:
    """Split a line on whitespace, or return None for comments and blanks."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    return stripped.split()


def _parse_floats(tokens: List[str]) -> Optional[Tuple[float, ...]]:
    try:
        values = tuple(float(token) for token in tokens)
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def _parse_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def _data_row(tokens: List[str]) -> ParsedLine:
    values = _parse_floats(tokens)
    if values is None:
        return ParsedLine(LineKind.UNRECOGNIZED, reason="non-numeric data row")
    return ParsedLine(LineKind.DATA, values=values)


def parse_cube_line(line: str) -> ParsedLine:
    """Classify one line of a .cube file."""
    tokens = tokenize(line)
    if tokens is None:
        return SKIPPED

    keyword = tokens[0].upper()

    if keyword == CUBE_SIZE_KEYWORD:
        if len(tokens) != 2:
            return ParsedLine(
                LineKind.MALFORMED,
                reason=f"{CUBE_SIZE_KEYWORD} expects 1 value, got {len(tokens) - 1}",
            )
        size = _parse_int(tokens[1])
        if size is None:
            return ParsedLine(LineKind.MALFORMED, reason=f"invalid size '{tokens[1]}'")
        if size < 1:
            return ParsedLine(LineKind.MALFORMED, reason=f"size must be positive, got {size}")
        return ParsedLine(LineKind.SIZE, number=size)

    if keyword in CUBE_DOMAIN_KEYWORDS:
        if len(tokens) != 4:
            return ParsedLine(
                LineKind.MALFORMED,
                reason=f"{keyword} expects 3 values, got {len(tokens) - 1}",
            )
        values = _parse_floats(tokens[1:])
        if values is None:
            return ParsedLine(LineKind.MALFORMED, reason=f"{keyword} values are not numeric")
        return ParsedLine(CUBE_DOMAIN_KEYWORDS[keyword], values=values)

    if keyword == CUBE_TITLE_KEYWORD:
        title = line.strip()[len(tokens[0]):].strip().strip('"')
        return ParsedLine(LineKind.TITLE, text=title)

    if len(tokens) == 3:
        return _data_row(tokens)

    return ParsedLine(LineKind.UNRECOGNIZED, reason=f"unexpected token count {len(tokens)}")


def parse_3dl_line(line: str) -> ParsedLine:
    """Classify one line of a .3dl file.

    The format has no size keyword: the first row with more than three
    numeric tokens enumerates one axis, and its token count is the cube
    edge length.
    """
    tokens = tokenize(line)
    if tokens is None:
        return SKIPPED

    if tokens[0].upper() == MESH_KEYWORD:
        if len(tokens) <= MESH_BITS_POSITION:
            return ParsedLine(LineKind.MALFORMED, reason="Mesh line without bit depth")
        bits = _parse_int(tokens[MESH_BITS_POSITION])
        if bits is None or not 1 <= bits <= 32:
            return ParsedLine(
                LineKind.MALFORMED,
                reason=f"invalid Mesh bit depth '{tokens[MESH_BITS_POSITION]}'",
            )
        return ParsedLine(LineKind.MESH, number=bits)

    if len(tokens) > 3:
        if _parse_floats(tokens) is None:
            return ParsedLine(LineKind.UNRECOGNIZED, reason="non-numeric axis row")
        return ParsedLine(LineKind.DIMENSION, number=len(tokens))

    if len(tokens) == 3:
        return _data_row(tokens)

    return ParsedLine(LineKind.UNRECOGNIZED, reason=f"unexpected token count {len(tokens)}")
