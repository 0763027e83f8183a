"""Parsing, validation and formatting of XML document trees.

Key Components:
    XMLTreeBuilder: Strict parser adapter producing read-only document trees
    SyntaxValidator: Well-formedness check
    ProfileValidator: Required-element check against a document profile
    CanonicalFormatter: Deterministic pretty-printer
"""

from .builder import (
    ParseResult,
    XMLComment,
    XMLDocument,
    XMLElement,
    XMLEntityReference,
    XMLProcessingInstruction,
    XMLText,
    XMLTreeBuilder,
    parse_string,
)
from .formatter import CanonicalFormatter, FormatResult
from .validation import ProfileValidator, SyntaxValidator

__all__ = [
    "ParseResult",
    "XMLComment",
    "XMLDocument",
    "XMLElement",
    "XMLEntityReference",
    "XMLProcessingInstruction",
    "XMLText",
    "XMLTreeBuilder",
    "parse_string",
    "CanonicalFormatter",
    "FormatResult",
    "ProfileValidator",
    "SyntaxValidator",
]
