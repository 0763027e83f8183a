"""Module-level entry points for one-off checks.

Each function builds its component from the given configuration, runs once
and returns data. None of them raise for bad documents.

Examples:
    >>> check_syntax("<TEI/>").success
    True
    >>> [m.text for m in check_structure("<NOTTEI/>")]
    ['The root element must be <TEI>']
    >>> format_xml("<a><b/></a>").formatted_output
    '<a>\\n  <b/>\\n</a>\\n'
"""

from typing import Optional

from tei_workbench.shared import EditorConfig, ValidationReport
from tei_workbench.tree.builder import ParseResult, XMLTreeBuilder
from tei_workbench.tree.formatter import CanonicalFormatter, FormatResult
from tei_workbench.tree.validation import ProfileValidator, SyntaxValidator


def parse(
    text: str,
    config: Optional[EditorConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse document text into a read-only tree or a parse error."""
    config = config or EditorConfig()
    return XMLTreeBuilder(config.global_, correlation_id).parse(text)


def check_syntax(
    text: str,
    config: Optional[EditorConfig] = None,
    correlation_id: Optional[str] = None
) -> ValidationReport:
    """Report whether the document is well-formed XML."""
    return SyntaxValidator(config, correlation_id).validate(text)


def check_structure(
    text: str,
    config: Optional[EditorConfig] = None,
    correlation_id: Optional[str] = None
) -> ValidationReport:
    """Report every violation of the configured profile, in check order."""
    return ProfileValidator(config, correlation_id).validate(text)


def format_xml(
    text: str,
    config: Optional[EditorConfig] = None,
    correlation_id: Optional[str] = None
) -> FormatResult:
    """Return the canonical form of a well-formed document."""
    return CanonicalFormatter(config, correlation_id).format(text)
