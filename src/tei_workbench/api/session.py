"""Editor session tying the document buffer to history, checks and export.

The session is the single owner of the document text, its history log and the
messages of the last action. The editing surface pushes whole-document
updates through ``update``; buttons map onto the other methods.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from tei_workbench.editing.history import HistoryLog
from tei_workbench.shared import (
    EditorConfig,
    MessageCatalog,
    MessageKind,
    ValidationMessage,
    ValidationReport,
    get_logger,
)
from tei_workbench.tree.builder import XMLTreeBuilder
from tei_workbench.tree.formatter import CanonicalFormatter, FormatResult
from tei_workbench.tree.validation import ProfileValidator, SyntaxValidator

DEFAULT_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<TEI xmlns="http://www.tei-c.org/ns/1.0" xml:lang="en">
  <teiHeader>
    <fileDesc>
      <titleStmt>
        <title>A TEI Document</title>
        <author>Author Name</author>
      </titleStmt>
      <publicationStmt>
        <publisher>Publisher</publisher>
        <availability status="free">
          <p>Freely available teaching material</p>
        </availability>
      </publicationStmt>
      <sourceDesc>
        <p>Born digital</p>
      </sourceDesc>
    </fileDesc>
    <encodingDesc>
      <appInfo>
        <application ident="tei_workbench" version="0.1.0">
          <desc>Document created with the TEI workbench</desc>
        </application>
      </appInfo>
    </encodingDesc>
  </teiHeader>
  <text>
    <body>
      <head>My TEI document</head>
      <p>Your text here...</p>
    </body>
  </text>
</TEI>
"""


@dataclass(frozen=True)
class ExportPayload:
    """Document bytes ready for a save-as collaborator."""

    data: bytes
    media_type: str
    filename: str


class EditorSession:
    """One user's editing session over a single document."""

    def __init__(
        self,
        initial: str = DEFAULT_DOCUMENT,
        config: Optional[EditorConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize editor session.

        Args:
            initial: Starting document text
            config: Editor configuration
            correlation_id: ID for log correlation; generated if omitted
        """
        self.config = config or EditorConfig()
        self.correlation_id = correlation_id or str(uuid.uuid4())[:8]
        self.logger = get_logger(__name__, self.correlation_id, "editor_session")
        self.catalog = MessageCatalog(self.config.locale)

        builder = XMLTreeBuilder(self.config.global_, self.correlation_id)
        self._syntax_validator = SyntaxValidator(self.config, self.correlation_id, builder)
        self._profile_validator = ProfileValidator(self.config, self.correlation_id, builder)
        self._formatter = CanonicalFormatter(self.config, self.correlation_id, builder)

        self.history = HistoryLog(initial, self.config.history, correlation_id=self.correlation_id)
        self._text = initial
        self._messages: List[ValidationMessage] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def messages(self) -> List[ValidationMessage]:
        """Messages produced by the last check or format action."""
        return list(self._messages)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def update(self, text: str) -> None:
        """Replace the whole buffer with an edit from the editing surface."""
        self._text = text
        self.history.record(text)

    def undo(self) -> bool:
        """Restore the previous snapshot; ``False`` if there is none."""
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._text = snapshot
        return True

    def redo(self) -> bool:
        """Restore the next snapshot; ``False`` if there is none."""
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._text = snapshot
        return True

    def check_syntax(self) -> ValidationReport:
        report = self._syntax_validator.validate(self._text)
        self._messages = list(report.messages)
        return report

    def check_structure(self) -> ValidationReport:
        report = self._profile_validator.validate(self._text)
        self._messages = list(report.messages)
        return report

    def format(self) -> FormatResult:
        """Reformat the buffer canonically.

        On success the buffer is replaced and the new text recorded as its
        own history entry. On failure buffer and history stay untouched.
        """
        result = self._formatter.format(self._text)
        if result.success:
            self._text = result.formatted_output
            self.history.record(result.formatted_output, coalesce=False)
            self._messages = [ValidationMessage(
                kind=MessageKind.SUCCESS, text=self.catalog.get("format_success")
            )]
        else:
            self._messages = [ValidationMessage(kind=MessageKind.ERROR, text=result.error.message)]
            self.logger.info(
                "Format request rejected",
                extra={"detail": result.error.detail}
            )
        return result

    def export(self) -> ExportPayload:
        """Package the current buffer for saving as a file."""
        settings = self.config.export
        return ExportPayload(
            data=self._text.encode(settings.encoding),
            media_type=settings.media_type,
            filename=settings.filename,
        )
