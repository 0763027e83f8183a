"""Shared utilities for the TEI workbench.

This module provides the result types, configuration objects, message
catalog and logging helpers used across all components.
"""

from .result import (
    FormatError,
    MessageKind,
    ParseError,
    ValidationMessage,
    ValidationReport,
)
from .messages import (
    MessageCatalog,
    SUPPORTED_LOCALES,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    DeclarationPolicy,
    EditorConfig,
    ExportConfig,
    FormatterConfig,
    GlobalConfig,
    HistoryConfig,
    ProfileConfig,
    RequiredElement,
    TEI_NAMESPACE,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "FormatError",
    "MessageKind",
    "ParseError",
    "ValidationMessage",
    "ValidationReport",
    "MessageCatalog",
    "SUPPORTED_LOCALES",
    "ConfigError",
    "ConfigValidationError",
    "DeclarationPolicy",
    "EditorConfig",
    "ExportConfig",
    "FormatterConfig",
    "GlobalConfig",
    "HistoryConfig",
    "ProfileConfig",
    "RequiredElement",
    "TEI_NAMESPACE",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
