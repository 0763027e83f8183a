"""TEI Workbench.

Validation and transformation engine behind a TEI document editor:
well-formedness checking, profile checking with itemized diagnostics,
canonical reformatting, and undo/redo over whole-document snapshots.

Progressive API Disclosure:
- Level 1: Simple functions - check_syntax(), check_structure(), format_xml()
- Level 2: Editor session - EditorSession class with history and export
- Level 3: Components - validators, formatter and history log with custom config
"""

__version__ = "0.1.0"
__author__ = "TEI Workbench Team"

# Level 1: Simple functions
# Level 2: Editor session
from .api import (
    DEFAULT_DOCUMENT,
    EditorSession,
    ExportPayload,
    check_structure,
    check_syntax,
    format_xml,
    parse,
)

# Level 3: Components
from .editing import HistoryLog
from .tree import CanonicalFormatter, ProfileValidator, SyntaxValidator, XMLTreeBuilder

# Configuration and result objects
from .shared import (
    EditorConfig,
    MessageKind,
    ProfileConfig,
    ValidationMessage,
    ValidationReport,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "check_syntax",
    "check_structure",
    "format_xml",
    "parse",

    # Level 2: Editor session
    "DEFAULT_DOCUMENT",
    "EditorSession",
    "ExportPayload",

    # Level 3: Components
    "CanonicalFormatter",
    "HistoryLog",
    "ProfileValidator",
    "SyntaxValidator",
    "XMLTreeBuilder",

    # Configuration and results
    "EditorConfig",
    "MessageKind",
    "ProfileConfig",
    "ValidationMessage",
    "ValidationReport",
]
