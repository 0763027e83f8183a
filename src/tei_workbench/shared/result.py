"""Result objects and diagnostic types for TEI document checking.

This module defines the data returned by every public operation: validation
messages and reports, and the failure values produced when a document cannot
be parsed or formatted. Failures are returned as data, never raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional


class MessageKind(Enum):
    """Kinds of messages surfaced to the presentation layer."""

    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"


@dataclass(frozen=True)
class ValidationMessage:
    """Single human-readable validation message."""

    kind: MessageKind
    text: str
    rule_id: Optional[str] = None
    element_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate message data."""
        if not self.text:
            raise ValueError("Validation message text cannot be empty")

    @property
    def is_error(self) -> bool:
        return self.kind is MessageKind.ERROR

    def to_dict(self) -> dict:
        """Convert message to a plain dictionary."""
        data = {"kind": self.kind.value, "text": self.text}
        if self.rule_id:
            data["rule_id"] = self.rule_id
        if self.element_path:
            data["element_path"] = self.element_path
        return data


@dataclass
class ValidationReport:
    """Ordered sequence of messages produced by one validation run.

    A successful run holds exactly one success message. A failing run holds
    one or more error messages and no success message.
    """

    messages: List[ValidationMessage] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @classmethod
    def single(cls, kind: MessageKind, text: str, rule_id: Optional[str] = None) -> "ValidationReport":
        """Create a report holding exactly one message."""
        return cls(messages=[ValidationMessage(kind=kind, text=text, rule_id=rule_id)])

    def add_error(
        self,
        text: str,
        rule_id: Optional[str] = None,
        element_path: Optional[str] = None
    ) -> None:
        """Append an error message."""
        self.messages.append(ValidationMessage(
            kind=MessageKind.ERROR,
            text=text,
            rule_id=rule_id,
            element_path=element_path
        ))

    def add_success(self, text: str, rule_id: Optional[str] = None) -> None:
        """Append the success message of a clean run."""
        if self.error_count:
            raise ValueError("Cannot add a success message to a failing report")
        self.messages.append(ValidationMessage(
            kind=MessageKind.SUCCESS, text=text, rule_id=rule_id
        ))

    @property
    def errors(self) -> List[ValidationMessage]:
        """Get error-kind messages in report order."""
        return [message for message in self.messages if message.kind is MessageKind.ERROR]

    @property
    def warnings(self) -> List[ValidationMessage]:
        """Get warning-kind messages in report order."""
        return [message for message in self.messages if message.kind is MessageKind.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def success(self) -> bool:
        """Whether the run produced its success message."""
        return any(message.kind is MessageKind.SUCCESS for message in self.messages)

    @property
    def texts(self) -> List[str]:
        return [message.text for message in self.messages]

    def to_dict(self) -> dict:
        """Convert report to a plain dictionary."""
        return {
            "success": self.success,
            "messages": [message.to_dict() for message in self.messages],
        }

    def __iter__(self) -> Iterator[ValidationMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class ParseError:
    """Well-formedness failure reported by the parser adapter.

    ``message`` carries the parser's own diagnostic text.
    """

    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate parse error data."""
        if not self.message:
            raise ValueError("Parse error message cannot be empty")

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class FormatError:
    """Failure of a formatting request.

    ``message`` is the user-facing instruction, ``detail`` the underlying
    parser diagnostic when there is one.
    """

    message: str
    detail: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate format error data."""
        if not self.message:
            raise ValueError("Format error message cannot be empty")

    def __str__(self) -> str:
        return self.message
