"""Shared decode loop, state and result types for LUT decoders."""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from ..config import DecoderConfig
from ..directives import LineKind, ParsedLine
from ..errors import (
    DecodeIssue,
    IssueKind,
    LutReadError,
    LutSizeLimitError,
    create_error_context,
    summarize_issues,
)
from ..image import PackedLutImage

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]
MIN_LUT_SIZE = 1

# Rows are buffered as floats and quantized into the image in blocks of this size
FLUSH_ROWS = 4096


class DecodePhase(Enum):
    """Decoder state machine phases."""
    AWAITING_SIZE = "awaiting_size"
    FILLING = "filling"
    DONE = "done"


class IssueLog:
    """Diagnostics collected while decoding one source.

    The first ``limit`` issues are kept; every issue is counted in ``total``.
    """

    def __init__(self, limit: int = 1000):
        self.limit = limit
        self.entries: List[DecodeIssue] = []
        self.total = 0

    @property
    def dropped(self) -> int:
        return self.total - len(self.entries)

    def add(self, issue: DecodeIssue) -> bool:
        """Count an issue and keep it if there is room. Returns True if kept."""
        self.total += 1
        if len(self.entries) < self.limit:
            self.entries.append(issue)
            return True
        return False


@dataclass(frozen=True)
class DecoderState:
    """Everything a decode knows after consuming a line.

    Each processing step returns a new state. The image, the row buffer
    and the issue log are shared between states and filled in place.
    """
    phase: DecodePhase = DecodePhase.AWAITING_SIZE
    size: Optional[int] = None
    index: int = 0
    image: Optional[PackedLutImage] = field(default=None, compare=False)
    pending: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
    title: Optional[str] = None
    halted: bool = False
    issues: IssueLog = field(default_factory=IssueLog, compare=False, repr=False)

    @property
    def capacity(self) -> int:
        return self.size ** 3 if self.size else 0


@dataclass
class DecodeResult:
    """Outcome of decoding one LUT source.

    Attributes:
        format: 'cube' or '3dl'
        image: Packed image, or None if no size was ever declared
        size: Cube edge length N
        rows_written: Number of data rows stored in the image
        halted: True if decoding stopped early on a duplicate size declaration
        issues: Recoverable problems met along the way, up to the configured limit
        dropped_issues: Issues counted but not kept once the limit was reached
        title: TITLE of a .cube file, if present
        source: Path or label of the input
    """
    format: str
    image: Optional[PackedLutImage]
    size: Optional[int]
    rows_written: int
    halted: bool = False
    issues: List[DecodeIssue] = field(default_factory=list)
    dropped_issues: int = 0
    title: Optional[str] = None
    source: Optional[str] = None

    @property
    def expected_rows(self) -> int:
        return self.size ** 3 if self.size else 0

    @property
    def issue_count(self) -> int:
        return len(self.issues) + self.dropped_issues

    @property
    def complete(self) -> bool:
        """True if every table entry was written and nothing halted the decode."""
        return (
            self.image is not None
            and not self.halted
            and self.rows_written == self.expected_rows
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "source": self.source,
            "title": self.title,
            "size": self.size,
            "width": self.image.width if self.image else None,
            "height": self.image.height if self.image else None,
            "rows_written": self.rows_written,
            "expected_rows": self.expected_rows,
            "halted": self.halted,
            "complete": self.complete,
            "issues": summarize_issues(self.issues),
            "dropped_issues": self.dropped_issues,
        }


class LutDecoder:
    """Base class for line-oriented LUT decoders.

    Subclasses provide ``parse_line`` to classify a line, ``step`` to fold a
    classified line into the decoder state and ``texel`` to place the
    index-th row in the packed image.
    """

    format_name = ""

    def __init__(self, config: Optional[DecoderConfig] = None):
        self.config = config or DecoderConfig()

    def parse_line(self, line: str) -> ParsedLine:
        raise NotImplementedError

    def step(self, state: DecoderState, parsed: ParsedLine, line_number: int, line: str) -> DecoderState:
        raise NotImplementedError

    def texel(self, index, size: int):
        raise NotImplementedError

    def initial_state(self) -> DecoderState:
        return DecoderState()

    def decode(self, path: Union[str, Path]) -> DecodeResult:
        """Decode a LUT file.

        Raises:
            LutReadError: If the file cannot be opened or read
        """
        path = Path(path)
        logger.info(f"Decoding {self.format_name} LUT: {path}")

        try:
            with open(path, "r", encoding=self.config.encoding) as f:
                return self.decode_lines(f, source=str(path))
        except (OSError, UnicodeDecodeError) as e:
            raise LutReadError(
                f"Failed to read LUT file {path}: {e}",
                context=create_error_context("read", f"decode_{self.format_name}", input_file=path),
            ) from e

    def decode_lines(self, lines: Iterable[str], source: Optional[str] = None) -> DecodeResult:
        """Decode LUT text supplied as an iterable of lines."""
        state = replace(self.initial_state(), issues=IssueLog(self.config.max_recorded_issues))

        for line_number, line in enumerate(lines, start=1):
            parsed = self.parse_line(line)
            if parsed.kind is LineKind.SKIP:
                continue
            state = self.step(state, parsed, line_number, line.rstrip("\r\n"))
            if state.phase is DecodePhase.DONE:
                break

        return self._finish(state, source)

    def _finish(self, state: DecoderState, source: Optional[str]) -> DecodeResult:
        if state.image is None:
            logger.warning(f"No size declaration found in {source or 'input'}, nothing decoded")
        else:
            if state.index % FLUSH_ROWS:
                self._flush(state)
            logger.info(f"dimension {state.image.width}x{state.image.height}")
            if state.index != state.capacity:
                logger.warning(f"Wrote {state.index} of {state.capacity} LUT entries")

        log = state.issues
        logger.info(f"Finished {self.format_name} decode: {state.index} rows, {log.total} issues")

        return DecodeResult(
            format=self.format_name,
            image=state.image,
            size=state.size,
            rows_written=state.index,
            halted=state.halted,
            issues=list(log.entries),
            dropped_issues=log.dropped,
            title=state.title,
            source=source,
        )

    # -------------------------------------------------------------------------
    # Steps shared by both formats
    # -------------------------------------------------------------------------

    def _record(
        self,
        state: DecoderState,
        kind: IssueKind,
        line_number: int,
        line: str,
        message: str,
        level: int = logging.INFO,
    ) -> DecoderState:
        log = state.issues
        issue = DecodeIssue(kind=kind, line_number=line_number, line=line, message=message)
        if log.add(issue):
            logger.log(level, f"Line {line_number}: {message}: {line}")
        elif log.dropped == 1:
            logger.warning(f"More than {log.limit} issues, counting the rest without keeping them")
        return state

    def _declare_size(self, state: DecoderState, size: int, line_number: int, line: str) -> DecoderState:
        """Allocate the image on the first size declaration, halt on any later one."""
        if state.image is not None:
            state = self._record(
                state,
                IssueKind.DUPLICATE_SIZE_DECLARATION,
                line_number,
                line,
                "corrupted data, size declared twice",
                level=logging.WARNING,
            )
            return replace(state, phase=DecodePhase.DONE, halted=True)

        if not MIN_LUT_SIZE <= size <= self.config.max_lut_size:
            raise LutSizeLimitError(
                f"LUT size {size} outside supported range "
                f"{MIN_LUT_SIZE}..{self.config.max_lut_size}",
                context=create_error_context(
                    "parse", f"decode_{self.format_name}", line_number=line_number, line=line
                ),
            )

        logger.info(f"lutSize: {size}")
        image = PackedLutImage(size, self.config.quantization)
        pending = np.zeros((min(FLUSH_ROWS, size ** 3), 3), dtype=np.float64)
        return replace(state, phase=DecodePhase.FILLING, size=size, image=image, pending=pending)

    def _accepts_row(self, state: DecoderState, line_number: int, line: str) -> Tuple[bool, DecoderState]:
        """Check a data row can be stored, recording why if it cannot."""
        if state.image is None:
            return False, self._record(
                state, IssueKind.PREMATURE_DATA_ROW, line_number, line, "not ready yet"
            )
        if state.index >= state.capacity:
            return False, self._record(
                state,
                IssueKind.EXCESS_DATA_ROW,
                line_number,
                line,
                f"table already holds {state.capacity} entries",
                level=logging.WARNING,
            )
        return True, state

    def _write_row(self, state: DecoderState, rgb: RGB) -> DecoderState:
        """Buffer the next normalized row, quantizing a full block into the image."""
        state.pending[state.index % FLUSH_ROWS] = rgb
        state = replace(state, index=state.index + 1)
        if state.index % FLUSH_ROWS == 0:
            self._flush(state)
        return state

    def _flush(self, state: DecoderState) -> None:
        """Quantize buffered rows since the last block boundary into the image."""
        if state.index == 0:
            return
        start = (state.index - 1) // FLUSH_ROWS * FLUSH_ROWS
        indices = np.arange(start, state.index)
        xs, ys = self.texel(indices, state.size)
        state.image.set_texels(xs, ys, state.pending[:state.index - start])

    def _reject(self, state: DecoderState, parsed: ParsedLine, line_number: int, line: str) -> DecoderState:
        """Record a malformed or unrecognized line and carry on."""
        if parsed.kind is LineKind.MALFORMED:
            return self._record(
                state, IssueKind.MALFORMED_DIRECTIVE, line_number, line, parsed.reason or "malformed directive"
            )
        return self._record(
            state, IssueKind.UNRECOGNIZED_LINE, line_number, line, parsed.reason or "unknown data"
        )
