"""Public API: one-off operations and the editor session."""

from .operations import check_structure, check_syntax, format_xml, parse
from .session import DEFAULT_DOCUMENT, EditorSession, ExportPayload

__all__ = [
    "check_structure",
    "check_syntax",
    "format_xml",
    "parse",
    "DEFAULT_DOCUMENT",
    "EditorSession",
    "ExportPayload",
]
