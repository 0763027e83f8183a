"""Canonical pretty-printing of well-formed documents.

The formatter walks the parsed tree and writes each line itself; it never
rewrites serialized text with patterns. The output is a fixed point:
formatting it again returns it unchanged.

Layout rules:
    - elements without content, or with only whitespace, are self-closed
    - elements holding only elements, comments and processing instructions
      (plus layout whitespace) are laid out one child per line, indented
    - elements holding significant text, or under ``xml:space="preserve"``,
      are written inline exactly as parsed, except that outside preserve
      mode the outer whitespace of their text is trimmed
"""

import time
from dataclasses import dataclass
from typing import List, Optional

from tei_workbench.shared import (
    DeclarationPolicy,
    EditorConfig,
    FormatError,
    MessageCatalog,
    get_logger,
)
from tei_workbench.tree.builder import (
    XMLComment,
    XMLDocument,
    XMLElement,
    XMLEntityReference,
    XMLNode,
    XMLProcessingInstruction,
    XMLText,
    XMLTreeBuilder,
    XML_WHITESPACE,
)

MS_PER_SECOND = 1000
XML_SPACE = "xml:space"


@dataclass
class FormatResult:
    """Result of a formatting request: new text or a format error."""

    success: bool
    formatted_output: str = ""
    error: Optional[FormatError] = None
    processing_time_ms: float = 0.0

    def __post_init__(self) -> None:
        """Validate format result."""
        if not self.success and self.error is None:
            raise ValueError("Failed format result requires an error")

    @property
    def output_size_bytes(self) -> int:
        return len(self.formatted_output.encode("utf-8"))


def escape_text(text: str) -> str:
    """Escape character data for element content."""
    return (text
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace("\r", "&#13;"))


def escape_attribute(value: str) -> str:
    """Escape an attribute value for double-quoted output.

    Whitespace characters that attribute normalization would turn into spaces
    are written as character references.
    """
    return (value
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("\t", "&#9;")
            .replace("\n", "&#10;")
            .replace("\r", "&#13;"))


class CanonicalFormatter:
    """Deterministic serializer for parsed documents."""

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        correlation_id: Optional[str] = None,
        builder: Optional[XMLTreeBuilder] = None
    ) -> None:
        """Initialize canonical formatter.

        Args:
            config: Editor configuration; its formatter section drives layout
            correlation_id: Optional correlation ID for session tracking
            builder: Parser adapter to use; a new one is created if omitted
        """
        self.config = config or EditorConfig()
        self.settings = self.config.formatter
        self.messages = MessageCatalog(self.config.locale)
        self.builder = builder or XMLTreeBuilder(self.config.global_, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "canonical_formatter")

    def format(self, text: str) -> FormatResult:
        """Parse ``text`` and return its canonical form.

        Malformed input is never partially formatted: the result carries a
        FormatError instead.
        """
        start_time = time.time()

        try:
            parsed = self.builder.parse(text)
            if not parsed.success:
                result = FormatResult(
                    success=False,
                    error=FormatError(
                        message=self.messages.get("format_requires_valid_syntax"),
                        detail=str(parsed.error) if parsed.error else None
                    )
                )
            else:
                result = FormatResult(success=True, formatted_output=self.render(parsed.document))
        except Exception as e:
            self.logger.error("Formatting failed unexpectedly")
            result = FormatResult(
                success=False,
                error=FormatError(
                    message=self.messages.get("format_unexpected", detail=str(e) or type(e).__name__),
                    detail=type(e).__name__
                )
            )

        result.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self.logger.info(
            "Formatting completed",
            extra={
                "success": result.success,
                "output_size_bytes": result.output_size_bytes,
                "processing_time_ms": result.processing_time_ms,
            }
        )
        return result

    def render(self, document: XMLDocument) -> str:
        """Serialize a parsed document in canonical layout."""
        lines: List[str] = []

        if self._emit_declaration(document):
            lines.append(self._declaration(document))
        if document.doctype:
            lines.append(document.doctype)
        for node in document.prolog:
            lines.append(self._inline(node))
        if document.root is not None:
            lines.extend(self._render_element(document.root, 0, preserve=False))
        for node in document.epilog:
            lines.append(self._inline(node))

        output = "\n".join(lines)
        if self.settings.trailing_newline:
            output += "\n"
        return output

    def _emit_declaration(self, document: XMLDocument) -> bool:
        policy = self.settings.xml_declaration
        if policy is DeclarationPolicy.ALWAYS:
            return True
        if policy is DeclarationPolicy.NEVER:
            return False
        return document.has_declaration

    def _declaration(self, document: XMLDocument) -> str:
        parts = [f'version="{document.version}"']
        if document.encoding:
            parts.append(f'encoding="{document.encoding}"')
        if document.standalone is not None:
            parts.append('standalone="{}"'.format("yes" if document.standalone else "no"))
        return "<?xml {}?>".format(" ".join(parts))

    def _render_element(self, element: XMLElement, depth: int, preserve: bool) -> List[str]:
        indent = self.settings.indent * depth
        space = element.attributes.get(XML_SPACE)
        if space is not None:
            preserve = space == "preserve"

        if preserve or element.has_significant_text:
            return [indent + self._inline(element, trim=not preserve)]

        structural = [child for child in element.children if not isinstance(child, XMLText)]
        if not structural:
            return [f"{indent}{self._start_tag(element)}/>"]

        lines = [f"{indent}{self._start_tag(element)}>"]
        child_indent = self.settings.indent * (depth + 1)
        for child in structural:
            if isinstance(child, XMLElement):
                lines.extend(self._render_element(child, depth + 1, preserve))
            else:
                lines.append(child_indent + self._inline(child))
        lines.append(f"{indent}</{element.tag}>")
        return lines

    def _start_tag(self, element: XMLElement) -> str:
        parts = [element.tag]
        for prefix in sorted(element.namespace_declarations, key=lambda p: (p is not None, p or "")):
            name = f"xmlns:{prefix}" if prefix else "xmlns"
            parts.append(f'{name}="{escape_attribute(element.namespace_declarations[prefix])}"')
        for name, value in element.attributes.items():
            parts.append(f'{name}="{escape_attribute(value)}"')
        return "<" + " ".join(parts)

    def _inline(self, node: XMLNode, trim: bool = False) -> str:
        """Serialize a node on one logical line, content untouched."""
        if isinstance(node, XMLText):
            return escape_text(node.text)
        if isinstance(node, XMLComment):
            return f"<!--{node.text}-->"
        if isinstance(node, XMLProcessingInstruction):
            if node.text:
                return f"<?{node.target} {node.text}?>"
            return f"<?{node.target}?>"
        if isinstance(node, XMLEntityReference):
            return f"&{node.name};"

        children = list(node.children)
        if trim:
            children = self._trim_outer_whitespace(children)
        if not children:
            return f"{self._start_tag(node)}/>"
        content = "".join(self._inline(child) for child in children)
        return f"{self._start_tag(node)}>{content}</{node.tag}>"

    def _trim_outer_whitespace(self, children: List[XMLNode]) -> List[XMLNode]:
        if children and isinstance(children[0], XMLText):
            children[0] = XMLText(children[0].text.lstrip(XML_WHITESPACE))
        if children and isinstance(children[-1], XMLText):
            children[-1] = XMLText(children[-1].text.rstrip(XML_WHITESPACE))
        return [child for child in children if not (isinstance(child, XMLText) and not child.text)]
