"""Configuration classes for the TEI workbench.

This module provides configuration objects for every component: the profile
the structural validator enforces, canonical formatting, edit history,
export, and global settings such as locale and logging level.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .messages import DEFAULT_LOCALE, SUPPORTED_LOCALES

TEI_NAMESPACE = "http://www.tei-c.org/ns/1.0"

# Required element names of the TEI preset
TEI_ROOT = "TEI"
TEI_HEADER = "teiHeader"
TEI_TEXT = "text"
TEI_FILE_DESC = "fileDesc"
TEI_TITLE_STMT = "titleStmt"
TEI_PUBLICATION_STMT = "publicationStmt"
TEI_SOURCE_DESC = "sourceDesc"
TEI_TITLE = "title"
TEI_BODY = "body"
TEI_GROUP = "group"


class DeclarationPolicy(Enum):
    """How the formatter treats the XML declaration."""

    PRESERVE = "preserve"   # Emit only if the input had one
    ALWAYS = "always"
    NEVER = "never"


@dataclass(frozen=True)
class RequiredElement:
    """One required element of a profile and the elements required inside it.

    ``alternatives`` name elements that may stand in for ``tag``; nested
    requirements are only checked when ``tag`` itself is present.
    """

    tag: str
    children: Tuple["RequiredElement", ...] = ()
    alternatives: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate requirement."""
        for name in (self.tag,) + tuple(self.alternatives):
            if not name:
                raise ValueError("Required element tag cannot be empty")
            if ":" in name:
                raise ValueError("Required element tag must be a local name")

    @property
    def accepted_tags(self) -> Tuple[str, ...]:
        return (self.tag,) + tuple(self.alternatives)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RequiredElement":
        return cls(
            tag=data["tag"],
            children=tuple(cls.from_dict(child) for child in data.get("children", ())),
            alternatives=tuple(data.get("alternatives", ()))
        )


def _tei_requirements() -> Tuple[RequiredElement, ...]:
    return (
        RequiredElement(TEI_HEADER, (
            RequiredElement(TEI_FILE_DESC, (
                RequiredElement(TEI_TITLE_STMT, (RequiredElement(TEI_TITLE),)),
                RequiredElement(TEI_PUBLICATION_STMT),
                RequiredElement(TEI_SOURCE_DESC),
            )),
        )),
        # A composite text holds a group of texts in place of a body
        RequiredElement(TEI_TEXT, (RequiredElement(TEI_BODY, alternatives=(TEI_GROUP,)),)),
    )


@dataclass(frozen=True)
class ProfileConfig:
    """Element-presence and nesting rules of the document profile."""

    name: str = "TEI"
    root_tag: str = TEI_ROOT
    namespace: Optional[str] = TEI_NAMESPACE
    requirements: Tuple[RequiredElement, ...] = field(default_factory=_tei_requirements)

    def __post_init__(self) -> None:
        """Validate profile configuration."""
        if not self.name:
            raise ValueError("profile name cannot be empty")
        if not self.root_tag:
            raise ValueError("root_tag cannot be empty")
        if self.namespace == "":
            raise ValueError("namespace must be a URI or None")

    @classmethod
    def tei(cls) -> "ProfileConfig":
        """Create the TEI P5 header/text profile."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileConfig":
        values = dict(data)
        if "requirements" in values:
            values["requirements"] = tuple(
                RequiredElement.from_dict(item) for item in values["requirements"]
            )
        return cls(**values)


@dataclass
class FormatterConfig:
    """Configuration for canonical formatting."""

    indent: str = "  "
    xml_declaration: DeclarationPolicy = DeclarationPolicy.PRESERVE
    trailing_newline: bool = True

    def __post_init__(self) -> None:
        """Validate formatter configuration."""
        if isinstance(self.xml_declaration, str):
            self.xml_declaration = DeclarationPolicy(self.xml_declaration)
        if self.indent.strip(" \t"):
            raise ValueError("indent may only contain spaces and tabs")


@dataclass
class HistoryConfig:
    """Configuration for the undo/redo log.

    The defaults record every update as its own entry and keep every entry.
    """

    coalesce_window_ms: float = 0.0
    max_entries: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate history configuration."""
        if self.coalesce_window_ms < 0:
            raise ValueError("coalesce_window_ms must be >= 0")
        if self.max_entries is not None and self.max_entries < 1:
            raise ValueError("max_entries must be >= 1 or None")


@dataclass
class ExportConfig:
    """Configuration for handing the document to a save-as collaborator."""

    filename: str = "tei-document.xml"
    media_type: str = "application/xml"
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate export configuration."""
        if not self.filename:
            raise ValueError("filename cannot be empty")
        if not self.media_type:
            raise ValueError("media_type cannot be empty")
        try:
            "".encode(self.encoding)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {self.encoding}") from e


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    locale: str = DEFAULT_LOCALE
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")
        if self.locale not in SUPPORTED_LOCALES:
            raise ValueError(f"locale must be one of {list(SUPPORTED_LOCALES)}")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_SECTIONS = {
    "profile": ProfileConfig,
    "formatter": FormatterConfig,
    "history": HistoryConfig,
    "export": ExportConfig,
    "global_": GlobalConfig,
}


@dataclass(frozen=True)
class EditorConfig:
    """Complete configuration for an editing session and its checks.

    Immutable; use ``override`` to derive variants.
    """

    profile: ProfileConfig = field(default_factory=ProfileConfig)
    formatter: FormatterConfig = field(default_factory=FormatterConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            for section in _SECTIONS:
                getattr(self, section).__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @property
    def locale(self) -> str:
        return self.global_.locale

    def override(self, **kwargs: Any) -> "EditorConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: ``section__field=value`` pairs, or top-level fields

        Returns:
            New EditorConfig instance with overrides applied

        Example:
            >>> config = EditorConfig()
            >>> config.override(formatter__indent="\\t", global___locale="it")
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        new_fields: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                section, field_name = key.split("__", 1)
                if section == "global" and field_name.startswith("_"):
                    section, field_name = "global_", field_name[1:]
                if section not in _SECTIONS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {section}",
                        field_name=key,
                        suggestions=sorted(_SECTIONS)
                    )
                nested_overrides.setdefault(section, {})[field_name] = value
            else:
                new_fields[key] = value

        for section, values in nested_overrides.items():
            try:
                new_fields[section] = replace(getattr(self, section), **values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=section) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _to_plain(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {name: _to_plain(getattr(obj, name)) for name in obj.__dataclass_fields__}
            if isinstance(obj, Enum):
                return obj.value
            if isinstance(obj, (list, tuple)):
                return [_to_plain(item) for item in obj]
            return obj

        result = _to_plain(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Create configuration from dictionary.

        Missing sections and fields keep their defaults.
        """
        values: Dict[str, Any] = {}
        try:
            for section, section_cls in _SECTIONS.items():
                if section not in data:
                    continue
                if section_cls is ProfileConfig:
                    values[section] = ProfileConfig.from_dict(data[section])
                else:
                    values[section] = section_cls(**data[section])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e
        if "name" in data:
            values["name"] = data["name"]
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "EditorConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "EditorConfig":
        """Create the TEI profile with indented formatting."""
        return cls(name="default")

    @classmethod
    def compact(cls) -> "EditorConfig":
        """Create preset formatting one element per line without indentation."""
        return cls(
            formatter=FormatterConfig(indent=""),
            name="compact"
        )
