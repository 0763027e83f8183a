"""Tests for result objects and the message catalog."""

import pytest

from tei_workbench.shared import (
    FormatError,
    MessageCatalog,
    MessageKind,
    ParseError,
    ValidationMessage,
    ValidationReport,
)


class TestValidationMessage:
    """Test ValidationMessage functionality."""

    def test_basic_message(self):
        """Test basic message creation."""
        message = ValidationMessage(kind=MessageKind.ERROR, text="Broken")

        assert message.is_error
        assert message.rule_id is None
        assert message.to_dict() == {"kind": "error", "text": "Broken"}

    def test_message_with_context(self):
        """Test message dictionary includes optional context."""
        message = ValidationMessage(
            kind=MessageKind.ERROR,
            text="Missing",
            rule_id="required_element",
            element_path="/TEI"
        )

        assert message.to_dict()["element_path"] == "/TEI"
        assert message.to_dict()["rule_id"] == "required_element"

    def test_empty_text_raises_error(self):
        """Test that empty text raises ValueError."""
        with pytest.raises(ValueError, match="Validation message text cannot be empty"):
            ValidationMessage(kind=MessageKind.SUCCESS, text="")


class TestValidationReport:
    """Test ValidationReport functionality."""

    def test_single(self):
        """Test single-message reports."""
        report = ValidationReport.single(MessageKind.SUCCESS, "Fine")

        assert report.success is True
        assert len(report) == 1
        assert report.texts == ["Fine"]

    def test_errors_keep_order(self):
        """Test that errors are reported in insertion order."""
        report = ValidationReport()
        report.add_error("first")
        report.add_error("second")

        assert report.success is False
        assert report.error_count == 2
        assert [m.text for m in report] == ["first", "second"]

    def test_success_cannot_follow_errors(self):
        """Test that a failing report never receives a success message."""
        report = ValidationReport()
        report.add_error("broken")

        with pytest.raises(ValueError, match="Cannot add a success message"):
            report.add_success("fine")

    def test_warnings_filter(self):
        """Test warning filtering."""
        report = ValidationReport(messages=[
            ValidationMessage(kind=MessageKind.WARNING, text="careful"),
        ])

        assert [m.text for m in report.warnings] == ["careful"]
        assert report.errors == []

    def test_to_dict(self):
        """Test report dictionary conversion."""
        report = ValidationReport.single(MessageKind.ERROR, "bad")

        assert report.to_dict() == {
            "success": False,
            "messages": [{"kind": "error", "text": "bad"}],
        }


class TestErrors:
    """Test parse and format error values."""

    def test_parse_error(self):
        """Test parse error string conversion and position."""
        error = ParseError("mismatch", line=2, column=5)

        assert str(error) == "mismatch"
        assert (error.line, error.column) == (2, 5)

    def test_empty_errors_rejected(self):
        """Test that empty error messages are rejected."""
        with pytest.raises(ValueError):
            ParseError("")
        with pytest.raises(ValueError):
            FormatError("")

    def test_format_error(self):
        """Test format error carries detail."""
        error = FormatError("Fix it", detail="line 1")

        assert str(error) == "Fix it"
        assert error.detail == "line 1"


class TestMessageCatalog:
    """Test localized message lookup."""

    def test_english(self):
        """Test English templates."""
        catalog = MessageCatalog("en")

        assert catalog.get("root_mismatch", root="TEI") == "The root element must be <TEI>"

    def test_italian(self):
        """Test Italian templates."""
        catalog = MessageCatalog("it")

        assert catalog.get("syntax_valid") == "La sintassi XML è valida"
        assert catalog.get("missing_child_in", child="title", parent="titleStmt") == (
            "Elemento <title> mancante in titleStmt"
        )

    def test_unknown_locale(self):
        """Test that unsupported locales are rejected."""
        with pytest.raises(ValueError, match="locale must be one of"):
            MessageCatalog("xx")

    def test_unknown_key(self):
        """Test that unknown keys raise KeyError."""
        with pytest.raises(KeyError):
            MessageCatalog().get("no_such_message")
