"""Tests for the canonical formatter."""

from unittest.mock import MagicMock

import pytest

from tei_workbench.api.session import DEFAULT_DOCUMENT
from tei_workbench.shared import EditorConfig
from tei_workbench.shared.config import TEI_NAMESPACE
from tei_workbench.tree.builder import parse_string
from tei_workbench.tree.formatter import (
    CanonicalFormatter,
    FormatResult,
    escape_attribute,
    escape_text,
)


def fmt(text: str, config: EditorConfig = None) -> str:
    """Format text and return the output, failing the test on errors."""
    result = CanonicalFormatter(config).format(text)
    assert result.success, result.error
    return result.formatted_output


class TestEscaping:
    """Test escaping helpers."""

    def test_escape_text(self):
        """Test character data escaping."""
        assert escape_text('1 < 2 & "3" > 0') == '1 &lt; 2 &amp; "3" &gt; 0'

    def test_escape_attribute(self):
        """Test attribute value escaping."""
        assert escape_attribute('a"b\tc\nd') == "a&quot;b&#9;c&#10;d"


class TestFormatResult:
    """Test FormatResult."""

    def test_failure_requires_error(self):
        """Test that failed results carry an error."""
        with pytest.raises(ValueError, match="requires an error"):
            FormatResult(success=False)

    def test_output_size(self):
        """Test output size in bytes."""
        assert FormatResult(success=True, formatted_output="è").output_size_bytes == 2


class TestCanonicalFormatter:
    """Test CanonicalFormatter layout rules."""

    def test_nested_empty_element(self):
        """Test the basic block layout."""
        assert fmt("<a><b/></a>") == "<a>\n  <b/>\n</a>\n"

    def test_tei_document_layout(self):
        """Test a compact TEI document is laid out one element per line."""
        text = (
            f'<TEI xmlns="{TEI_NAMESPACE}"><teiHeader><fileDesc>'
            "<titleStmt><title>T</title></titleStmt>"
            "<publicationStmt/><sourceDesc/>"
            "</fileDesc></teiHeader><text><body/></text></TEI>"
        )

        assert fmt(text) == (
            f'<TEI xmlns="{TEI_NAMESPACE}">\n'
            "  <teiHeader>\n"
            "    <fileDesc>\n"
            "      <titleStmt>\n"
            "        <title>T</title>\n"
            "      </titleStmt>\n"
            "      <publicationStmt/>\n"
            "      <sourceDesc/>\n"
            "    </fileDesc>\n"
            "  </teiHeader>\n"
            "  <text>\n"
            "    <body/>\n"
            "  </text>\n"
            "</TEI>\n"
        )

    def test_intra_tag_whitespace_normalized(self):
        """Test that attribute spacing inside tags is normalized."""
        assert fmt('<a   x="1"\n   y="2"  ><b  /></a>') == '<a x="1" y="2">\n  <b/>\n</a>\n'

    def test_mixed_content_kept_inline(self):
        """Test that inline markup inside text is not broken up."""
        text = '<p>Hello <hi rend="b">big</hi> world</p>'

        assert fmt(text) == text + "\n"

    def test_outer_text_whitespace_trimmed(self):
        """Test that text elements lose their leading and trailing whitespace."""
        assert fmt("<r>\n  <p>\n   Hello\n  </p>\n</r>") == "<r>\n  <p>Hello</p>\n</r>\n"

    def test_whitespace_only_element_self_closed(self):
        """Test that whitespace-only content collapses."""
        assert fmt("<r>\n  <body>\n  </body>\n</r>") == "<r>\n  <body/>\n</r>\n"

    def test_non_breaking_space_is_content(self):
        """Test that U+00A0 is text, not XML whitespace."""
        assert fmt("<r><p>\xa0</p></r>") == "<r>\n  <p>\xa0</p>\n</r>\n"
        assert fmt("<r><p> \xa0a\xa0\n</p></r>") == "<r>\n  <p>\xa0a\xa0</p>\n</r>\n"

    def test_preserve_space(self):
        """Test that xml:space="preserve" content is untouched."""
        text = '<r><p xml:space="preserve">  a  </p></r>'

        assert fmt(text) == '<r>\n  <p xml:space="preserve">  a  </p>\n</r>\n'

    def test_declaration_preserved(self):
        """Test that an existing declaration is kept."""
        text = '<?xml version="1.0" encoding="UTF-8"?>\n<a/>'

        assert fmt(text) == '<?xml version="1.0" encoding="UTF-8"?>\n<a/>\n'

    def test_declaration_policy_never(self):
        """Test dropping the declaration."""
        config = EditorConfig().override(formatter__xml_declaration="never")

        assert fmt('<?xml version="1.0"?><a/>', config) == "<a/>\n"

    def test_declaration_policy_always(self):
        """Test adding a bare declaration."""
        config = EditorConfig().override(formatter__xml_declaration="always")

        assert fmt("<a/>", config) == '<?xml version="1.0"?>\n<a/>\n'

    def test_declaration_without_standalone(self):
        """Test that no standalone flag is invented."""
        assert fmt('<?xml version="1.0"?><a/>') == '<?xml version="1.0"?>\n<a/>\n'

    def test_declaration_standalone_kept(self):
        """Test that a written standalone flag is kept."""
        text = '<?xml version="1.0" standalone="yes"?><a/>'

        assert fmt(text) == '<?xml version="1.0" standalone="yes"?>\n<a/>\n'

    def test_single_byte_declaration_ascii_content(self):
        """Test that a Latin-1 declaration over ASCII text is kept stable."""
        text = "<?xml version='1.0' encoding='ISO-8859-1'?><a>plain</a>"

        once = fmt(text)

        assert once == '<?xml version="1.0" encoding="ISO-8859-1"?>\n<a>plain</a>\n'
        assert fmt(once) == once

    def test_single_byte_declaration_non_ascii_refused(self):
        """Test that accented text under a Latin-1 declaration is not garbled."""
        result = CanonicalFormatter().format(
            '<?xml version="1.0" encoding="ISO-8859-1"?><a>café</a>'
        )

        assert result.success is False
        assert result.formatted_output == ""
        assert result.error.message == "Fix the XML syntax errors before formatting"
        assert "ISO-8859-1" in result.error.detail

    def test_no_trailing_newline(self):
        """Test disabling the trailing newline."""
        config = EditorConfig().override(formatter__trailing_newline=False)

        assert fmt("<a/>", config) == "<a/>"

    def test_compact_preset(self):
        """Test formatting without indentation."""
        assert fmt("<a><b/></a>", EditorConfig.compact()) == "<a>\n<b/>\n</a>\n"

    def test_comments_and_processing_instructions(self):
        """Test that comments and PIs get their own lines."""
        text = "<!-- c --><a><!-- inner --><?pi x?><b/></a>"

        assert fmt(text) == "<!-- c -->\n<a>\n  <!-- inner -->\n  <?pi x?>\n  <b/>\n</a>\n"

    def test_doctype_kept(self):
        """Test that the DOCTYPE is written verbatim."""
        doctype = '<!DOCTYPE a [<!ENTITY x "y">]>'

        assert fmt(f"{doctype}<a>&x;</a>") == f"{doctype}\n<a>&x;</a>\n"

    def test_doctype_inside_comment_ignored(self):
        """Test that a DOCTYPE mentioned in a prolog comment is not taken as one."""
        text = "<!-- <!DOCTYPE x> --><!DOCTYPE a><a/>"

        assert parse_string(text).document.doctype == "<!DOCTYPE a>"
        assert fmt(text) == "<!DOCTYPE a>\n<!-- <!DOCTYPE x> -->\n<a/>\n"

    def test_namespace_declarations_sorted(self):
        """Test namespace declaration order with the default first."""
        text = '<a xmlns:z="urn:z" xmlns="urn:d" xmlns:b="urn:b" id="1"><c/></a>'

        assert fmt(text) == (
            '<a xmlns="urn:d" xmlns:b="urn:b" xmlns:z="urn:z" id="1">\n  <c/>\n</a>\n'
        )

    def test_escaping_round_trip(self):
        """Test that escaped characters are written back escaped."""
        text = '<a t="x &amp; &quot;y&quot;">1 &lt; 2 &amp; 3 &gt; 2</a>'

        assert fmt(text) == text + "\n"

    def test_cdata_written_as_text(self):
        """Test that CDATA content is written as escaped text."""
        assert fmt("<a><![CDATA[x < y]]></a>") == "<a>x &lt; y</a>\n"

    def test_default_document_is_canonical(self):
        """Test that the starter document is already in canonical form."""
        assert fmt(DEFAULT_DOCUMENT) == DEFAULT_DOCUMENT

    def test_no_trailing_whitespace_on_lines(self):
        """Test that no output line ends with whitespace."""
        output = fmt("<r>\n\t<a>  <b/>  </a>   <c> x </c>\n</r>")

        assert all(line == line.rstrip() for line in output.splitlines())

    @pytest.mark.parametrize("text", [
        "<a><b/></a>",
        '<p>Hello <hi rend="b">big</hi> world</p>',
        "<r>\n  <p>\n   Hello\n  </p>\n  <q>a\n  b</q>\n</r>",
        '<r><p xml:space="preserve">\n x \n</p></r>',
        "<!-- c --><a><?pi x?><b>&amp;&#13;</b></a><!-- d -->",
        DEFAULT_DOCUMENT,
    ])
    def test_idempotent(self, text):
        """Test that formatting formatted output changes nothing."""
        once = fmt(text)

        assert fmt(once) == once

    def test_malformed_input(self):
        """Test that malformed input is refused without partial output."""
        result = CanonicalFormatter().format("<a><b></a>")

        assert result.success is False
        assert result.formatted_output == ""
        assert result.error.message == "Fix the XML syntax errors before formatting"
        assert result.error.detail

    def test_malformed_input_italian(self):
        """Test the localized refusal message."""
        config = EditorConfig().override(global___locale="it")

        result = CanonicalFormatter(config).format("<a>")

        assert result.error.message == "Correggi prima gli errori di sintassi XML"

    def test_unexpected_exception(self):
        """Test that internal failures become a format error."""
        builder = MagicMock()
        builder.parse.side_effect = RuntimeError("boom")

        result = CanonicalFormatter(builder=builder).format("<a/>")

        assert result.success is False
        assert result.error.message == "Formatting failed: boom"
