"""Document parser adapter and read-only tree model.

This module wraps lxml's strict XML parser. A parse either produces a fresh
``XMLDocument`` tree, detached from lxml and never mutated afterwards, or a
``ParseError`` carrying lxml's own diagnostic text. Nothing is cached between
calls.

The document text is handed to lxml as UTF-8. A declared encoding is
accepted only when the text reads the same under it, so a declaration can
never make the parser reinterpret the content.
"""

import codecs
import re
import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from lxml import etree

from tei_workbench.shared import (
    GlobalConfig,
    MessageCatalog,
    ParseError,
    get_logger,
)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XML_WHITESPACE = " \t\r\n"

_DECLARATION_PATTERN = re.compile(r"\ufeff?<\?xml[\s?]")
_PSEUDO_ATTRIBUTE_PATTERN = re.compile(r"""(version|encoding|standalone)\s*=\s*(["'])(.*?)\2""")
_STANDALONE_VALUES = {"yes": True, "no": False}
MS_PER_SECOND = 1000


@dataclass(frozen=True)
class XMLText:
    """Character data between markup."""

    text: str

    @property
    def is_whitespace(self) -> bool:
        return not self.text.strip(XML_WHITESPACE)


@dataclass(frozen=True)
class XMLComment:
    text: str


@dataclass(frozen=True)
class XMLProcessingInstruction:
    target: str
    text: Optional[str] = None


@dataclass(frozen=True)
class XMLEntityReference:
    """Reference to an entity left unexpanded by the parser."""

    name: str


@dataclass(frozen=True, eq=False)
class XMLElement:
    """Represents a single XML element in the document tree.

    ``tag`` is the qualified name as written (``prefix:local`` or ``local``);
    ``attributes`` map qualified attribute names to values in document order;
    ``namespace_declarations`` holds the ``xmlns`` bindings introduced on this
    element, with ``None`` standing for the default namespace.
    """

    tag: str
    local_name: str
    namespace: Optional[str] = None
    prefix: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    namespace_declarations: Dict[Optional[str], str] = field(default_factory=dict)
    children: Tuple["XMLNode", ...] = ()

    def __post_init__(self) -> None:
        """Validate element data."""
        if not self.tag:
            raise ValueError("Element tag cannot be empty")
        if not self.local_name:
            raise ValueError("Element local name cannot be empty")

    @property
    def element_children(self) -> List["XMLElement"]:
        return [child for child in self.children if isinstance(child, XMLElement)]

    @property
    def has_significant_text(self) -> bool:
        """Whether any direct text is more than layout whitespace."""
        return any(
            isinstance(child, XMLEntityReference)
            or (isinstance(child, XMLText) and not child.is_whitespace)
            for child in self.children
        )

    def find_child(self, local_name: str) -> Optional["XMLElement"]:
        """Find the first direct child element with the given local name."""
        for child in self.element_children:
            if child.local_name == local_name:
                return child
        return None

    def iter_elements(self) -> Iterator["XMLElement"]:
        """Iterate over this element and its descendants in document order."""
        yield self
        for child in self.element_children:
            yield from child.iter_elements()


XMLNode = Union[XMLElement, XMLText, XMLComment, XMLProcessingInstruction, XMLEntityReference]
MiscNode = Union[XMLComment, XMLProcessingInstruction]


@dataclass(frozen=True, eq=False)
class XMLDocument:
    """Root document container with declaration metadata.

    ``encoding`` and ``standalone`` are what the XML declaration spells out,
    ``None`` when it does not. ``prolog`` and ``epilog`` hold the comments
    and processing instructions before and after the root element.
    """

    root: Optional[XMLElement]
    version: str = "1.0"
    encoding: Optional[str] = None
    standalone: Optional[bool] = None
    has_declaration: bool = False
    doctype: Optional[str] = None
    prolog: Tuple[MiscNode, ...] = ()
    epilog: Tuple[MiscNode, ...] = ()

    @property
    def total_elements(self) -> int:
        if self.root is None:
            return 0
        return sum(1 for _ in self.root.iter_elements())


@dataclass
class ParseResult:
    """Outcome of one parse: a document or a parse error, never both."""

    success: bool
    document: Optional[XMLDocument] = None
    error: Optional[ParseError] = None
    processing_time_ms: float = 0.0

    def __post_init__(self) -> None:
        """Validate parse result."""
        if self.success and self.document is None:
            raise ValueError("Successful parse result requires a document")
        if not self.success and self.error is None:
            raise ValueError("Failed parse result requires an error")

    @classmethod
    def ok(cls, document: XMLDocument, processing_time_ms: float = 0.0) -> "ParseResult":
        return cls(success=True, document=document, processing_time_ms=processing_time_ms)

    @classmethod
    def failed(cls, error: ParseError, processing_time_ms: float = 0.0) -> "ParseResult":
        return cls(success=False, error=error, processing_time_ms=processing_time_ms)


def _read_declaration(text: str) -> Optional[Dict[str, str]]:
    """Return the XML declaration's pseudo-attributes exactly as written."""
    match = _DECLARATION_PATTERN.match(text)
    if not match:
        return None
    start = match.end() - 1
    end = text.find("?>", start)
    body = text[start:end] if end >= 0 else text[start:]
    return {name: value for name, _, value in _PSEUDO_ATTRIBUTE_PATTERN.findall(body)}


def _encoding_mismatch(declared: str, data: bytes, text: str) -> bool:
    """Whether the UTF-8 ``data`` of ``text`` reads differently under ``declared``."""
    try:
        codec = codecs.lookup(declared)
    except LookupError:
        # Unknown names are left to the parser to report
        return False
    if codec.name == "utf-8":
        return False
    try:
        return data.decode(codec.name) != text
    except UnicodeDecodeError:
        return True


def _position(text: str, offset: int) -> Tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - text.rfind("\n", 0, offset)
    return line, column


def _skip_past(text: str, terminator: str, index: int) -> int:
    end = text.find(terminator, index)
    return len(text) if end < 0 else end + len(terminator)


def _doctype_end(text: str, start: int) -> Optional[int]:
    depth = 0
    quote = None
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
        elif depth and text.startswith("<!--", index):
            index = _skip_past(text, "-->", index)
            continue
        elif depth and text.startswith("<?", index):
            index = _skip_past(text, "?>", index)
            continue
        elif char in "\"'":
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == ">" and depth == 0:
            return index + 1
        index += 1
    return None


def _extract_doctype(text: str) -> Optional[str]:
    """Return the raw DOCTYPE declaration, internal subset included.

    Only the prolog is scanned: whitespace, comments and processing
    instructions are skipped until the DOCTYPE or the first element.
    """
    index = 1 if text.startswith("\ufeff") else 0
    while index < len(text):
        if text[index] in XML_WHITESPACE:
            index += 1
        elif text.startswith("<?", index):
            index = _skip_past(text, "?>", index)
        elif text.startswith("<!--", index):
            index = _skip_past(text, "-->", index)
        elif text.startswith("<!DOCTYPE", index):
            end = _doctype_end(text, index)
            return text[index:end] if end is not None else None
        else:
            return None
    return None


class XMLTreeBuilder:
    """Strict parser adapter producing ``XMLDocument`` trees.

    Any input that is not well-formed XML is rejected; there is no recovery.
    """

    def __init__(
        self,
        config: Optional[GlobalConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Global settings (locale, input size limit)
            correlation_id: Optional correlation ID for session tracking
        """
        self.config = config or GlobalConfig()
        self.correlation_id = correlation_id
        self.messages = MessageCatalog(self.config.locale)
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

    def _make_parser(self) -> etree.XMLParser:
        return etree.XMLParser(
            recover=False,
            resolve_entities=False,
            no_network=True,
            load_dtd=False,
            remove_blank_text=False,
            remove_comments=False,
            remove_pis=False,
        )

    def _failed(self, error: ParseError, start_time: float) -> ParseResult:
        return ParseResult.failed(error, (time.time() - start_time) * MS_PER_SECOND)

    def parse(self, text: str) -> ParseResult:
        """Parse document text into a tree.

        Args:
            text: Whole XML document

        Returns:
            ParseResult holding either the document or the parse error
        """
        start_time = time.time()

        if not text.strip(XML_WHITESPACE):
            return self._failed(ParseError(self.messages.get("empty_document")), start_time)

        try:
            data = text.encode("utf-8")
        except UnicodeEncodeError as e:
            line, column = _position(text, e.start)
            self.logger.debug(
                "Document holds characters that cannot be encoded",
                extra={"line": line, "column": column}
            )
            return self._failed(ParseError(message=str(e), line=line, column=column), start_time)

        limit = self.config.max_input_size_bytes
        if limit is not None and len(data) > limit:
            self.logger.warning(
                "Document rejected by size limit",
                extra={"size_bytes": len(data), "limit_bytes": limit}
            )
            return self._failed(
                ParseError(self.messages.get("input_too_large", limit=limit)), start_time
            )

        declaration = _read_declaration(text)
        declared = declaration.get("encoding") if declaration else None
        if declared and _encoding_mismatch(declared, data, text):
            self.logger.debug(
                "Declared encoding does not match the document text",
                extra={"declared_encoding": declared}
            )
            return self._failed(
                ParseError(self.messages.get("encoding_mismatch", encoding=declared), line=1),
                start_time
            )

        try:
            source_root = etree.fromstring(data, self._make_parser())
        except etree.XMLSyntaxError as e:
            line, column = getattr(e, "position", (None, None))
            message = str(e) or self.messages.get("syntax_error_fallback")
            self.logger.debug(
                "Document is not well-formed",
                extra={"line": line, "column": column, "parser_message": message}
            )
            return self._failed(ParseError(message=message, line=line, column=column), start_time)

        document = self._build_document(source_root, text, declaration)
        processing_time = (time.time() - start_time) * MS_PER_SECOND

        self.logger.debug(
            "Document parsed",
            extra={
                "root_tag": document.root.tag if document.root is not None else None,
                "element_count": document.total_elements,
                "processing_time_ms": processing_time,
            }
        )
        return ParseResult.ok(document, processing_time)

    def _build_document(
        self,
        source_root: etree._Element,
        text: str,
        declaration: Optional[Dict[str, str]]
    ) -> XMLDocument:
        docinfo = source_root.getroottree().docinfo
        written = declaration or {}
        prolog = [
            self._convert_misc(node)
            for node in reversed(list(source_root.itersiblings(preceding=True)))
        ]
        epilog = [self._convert_misc(node) for node in source_root.itersiblings()]

        return XMLDocument(
            root=self._convert_element(source_root, {}),
            version=written.get("version") or docinfo.xml_version or "1.0",
            encoding=written.get("encoding"),
            standalone=_STANDALONE_VALUES.get(written.get("standalone", "")),
            has_declaration=declaration is not None,
            doctype=_extract_doctype(text) if docinfo.doctype else None,
            prolog=tuple(node for node in prolog if node is not None),
            epilog=tuple(node for node in epilog if node is not None),
        )

    def _convert_misc(self, node: etree._Element) -> Optional[MiscNode]:
        if node.tag is etree.Comment:
            return XMLComment(node.text or "")
        if node.tag is etree.ProcessingInstruction:
            return XMLProcessingInstruction(node.target, node.text)
        return None

    def _convert_element(
        self,
        source: etree._Element,
        parent_nsmap: Dict[Optional[str], str]
    ) -> XMLElement:
        qname = etree.QName(source)
        nsmap = dict(source.nsmap)

        declarations = {
            prefix: uri for prefix, uri in nsmap.items()
            if parent_nsmap.get(prefix) != uri
        }
        if None in parent_nsmap and None not in nsmap:
            declarations[None] = ""

        children: List[XMLNode] = []
        if source.text:
            children.append(XMLText(source.text))
        for child in source:
            if child.tag is etree.Comment:
                children.append(XMLComment(child.text or ""))
            elif child.tag is etree.ProcessingInstruction:
                children.append(XMLProcessingInstruction(child.target, child.text))
            elif child.tag is etree.Entity:
                children.append(XMLEntityReference(child.name))
            else:
                children.append(self._convert_element(child, nsmap))
            if child.tail:
                children.append(XMLText(child.tail))

        prefix = source.prefix
        return XMLElement(
            tag=f"{prefix}:{qname.localname}" if prefix else qname.localname,
            local_name=qname.localname,
            namespace=qname.namespace,
            prefix=prefix,
            attributes={
                self._attribute_name(key, nsmap): value
                for key, value in source.attrib.items()
            },
            namespace_declarations=declarations,
            children=tuple(children),
        )

    def _attribute_name(self, key: str, nsmap: Dict[Optional[str], str]) -> str:
        if not key.startswith("{"):
            return key
        qname = etree.QName(key)
        if qname.namespace == XML_NAMESPACE:
            return f"xml:{qname.localname}"
        for prefix, uri in nsmap.items():
            if prefix is not None and uri == qname.namespace:
                return f"{prefix}:{qname.localname}"
        return key


def parse_string(
    text: str,
    config: Optional[GlobalConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse document text with a one-off builder."""
    return XMLTreeBuilder(config, correlation_id).parse(text)
