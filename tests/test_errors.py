"""Tests for the errors module."""
from lutpack.errors import (
    ConfigurationError,
    DecodeIssue,
    DegenerateDomainError,
    ErrorContext,
    FatalError,
    IssueKind,
    LutError,
    LutReadError,
    LutSizeLimitError,
    LutWriteError,
    UnsupportedFormatError,
    create_error_context,
    summarize_issues,
)


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    def test_fatal_error_is_lut_error(self):
        assert isinstance(FatalError("test"), LutError)

    def test_terminal_errors_are_fatal(self):
        for error_class in (
            UnsupportedFormatError,
            LutReadError,
            LutWriteError,
            DegenerateDomainError,
            LutSizeLimitError,
            ConfigurationError,
        ):
            assert isinstance(error_class("test"), FatalError)

    def test_context_is_optional(self):
        assert LutError("test").context is None


class TestErrorContext:
    """Tests for ErrorContext class."""

    def test_create_context(self):
        context = create_error_context(
            "parse", "decode_cube", input_file="/luts/a.cube", line_number=12, size=300
        )

        assert context.stage == "parse"
        assert context.input_file == "/luts/a.cube"
        assert context.line_number == 12
        assert context.additional_info == {"size": 300}
        assert context.timestamp is not None

    def test_context_to_dict(self):
        data = ErrorContext(stage="read", operation="decode_3dl", line="Mesh 0").to_dict()

        assert data["stage"] == "read"
        assert data["line"] == "Mesh 0"
        assert data["line_number"] is None

    def test_context_str(self):
        text = str(ErrorContext(stage="normalize", operation="decode_cube", line_number=4))

        assert "normalize" in text
        assert "Line: 4" in text


class TestDecodeIssues:
    """Tests for recoverable decode diagnostics."""

    def test_to_dict(self):
        issue = DecodeIssue(IssueKind.PREMATURE_DATA_ROW, 3, "0 0 0", "not ready yet")
        assert issue.to_dict() == {
            "kind": "premature_data_row",
            "line_number": 3,
            "line": "0 0 0",
            "message": "not ready yet",
        }

    def test_summarize(self):
        issues = [
            DecodeIssue(IssueKind.UNRECOGNIZED_LINE, 1, "x", "unknown data"),
            DecodeIssue(IssueKind.UNRECOGNIZED_LINE, 2, "y", "unknown data"),
            DecodeIssue(IssueKind.MALFORMED_DIRECTIVE, 3, "DOMAIN_MIN 0", "bad"),
        ]
        assert summarize_issues(issues) == {"unrecognized_line": 2, "malformed_directive": 1}
