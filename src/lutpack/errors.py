"""Error handling module for lutpack decoding.

Provides the exception hierarchy for terminal failures, error context
for debugging, and diagnostic records for recoverable decode conditions.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


# =============================================================================
# Error Classification
# =============================================================================

class LutError(Exception):
    """Base exception for all lutpack errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        super().__init__(message)
        self.context = context


class FatalError(LutError):
    """Non-recoverable errors that abort a decode.

    These errors indicate problems that cannot be skipped line by line,
    so no image is returned to the caller.
    """
    pass


class UnsupportedFormatError(FatalError):
    """File extension is not a recognized LUT format."""
    pass


class LutReadError(FatalError):
    """The LUT source could not be opened or read."""
    pass


class LutWriteError(FatalError):
    """The packed image could not be written."""
    pass


class DegenerateDomainError(FatalError):
    """DOMAIN_MIN equals DOMAIN_MAX on at least one channel."""
    pass


class LutSizeLimitError(FatalError):
    """Declared cube edge length is outside the configured bounds."""
    pass


class ConfigurationError(FatalError):
    """Invalid configuration."""
    pass


# =============================================================================
# Error Context
# =============================================================================

@dataclass
class ErrorContext:
    """Detailed context for debugging errors.

    Captures where in the decode the failure happened.
    """
    stage: str
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    input_file: Optional[str] = None
    line_number: Optional[int] = None
    line: Optional[str] = None
    additional_info: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "stage": self.stage,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "input_file": self.input_file,
            "line_number": self.line_number,
            "line": self.line,
            "additional_info": self.additional_info,
        }

    def __str__(self) -> str:
        """Human-readable error context."""
        lines = [
            f"Stage: {self.stage}",
            f"Operation: {self.operation}",
            f"Timestamp: {self.timestamp}",
        ]

        if self.input_file:
            lines.append(f"Input: {self.input_file}")
        if self.line_number is not None:
            lines.append(f"Line: {self.line_number}")
        if self.line:
            lines.append(f"Content: {self.line[:200]}")
        if self.additional_info:
            lines.append(f"Details: {self.additional_info}")

        return "\n".join(lines)


def create_error_context(
    stage: str,
    operation: str,
    input_file: Optional[Union[str, Path]] = None,
    line_number: Optional[int] = None,
    line: Optional[str] = None,
    **additional_info: Any
) -> ErrorContext:
    """Create an error context for a decode failure."""
    return ErrorContext(
        stage=stage,
        operation=operation,
        input_file=str(input_file) if input_file else None,
        line_number=line_number,
        line=line,
        additional_info=additional_info,
    )


# =============================================================================
# Recoverable Decode Diagnostics
# =============================================================================

class IssueKind(Enum):
    """Recoverable conditions met while decoding a LUT."""
    MALFORMED_DIRECTIVE = "malformed_directive"
    PREMATURE_DATA_ROW = "premature_data_row"
    DUPLICATE_SIZE_DECLARATION = "duplicate_size_declaration"
    EXCESS_DATA_ROW = "excess_data_row"
    UNRECOGNIZED_LINE = "unrecognized_line"


@dataclass(frozen=True)
class DecodeIssue:
    """A single skipped or halting line."""
    kind: IssueKind
    line_number: int
    line: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "line_number": self.line_number,
            "line": self.line,
            "message": self.message,
        }


def summarize_issues(issues: List[DecodeIssue]) -> Dict[str, int]:
    """Count issues by kind."""
    by_kind: Dict[str, int] = {}
    for issue in issues:
        by_kind[issue.kind.value] = by_kind.get(issue.kind.value, 0) + 1
    return by_kind
