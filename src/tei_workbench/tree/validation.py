"""Well-formedness and profile validation for TEI documents.

This module provides the syntax validator, which only reports whether a
document parses, and the profile validator, which walks a parsed document and
reports every missing required element as its own ordered error message.
Both return ``ValidationReport`` data and never raise.
"""

import time
from typing import Optional, Sequence

from tei_workbench.shared import (
    EditorConfig,
    MessageCatalog,
    MessageKind,
    ProfileConfig,
    RequiredElement,
    ValidationReport,
    get_logger,
)
from tei_workbench.tree.builder import XMLDocument, XMLElement, XMLTreeBuilder

MS_PER_SECOND = 1000

# Rule identifiers attached to profile messages
RULE_PARSE = "parse"
RULE_ROOT = "root_element"
RULE_NAMESPACE = "root_namespace"
RULE_REQUIRED = "required_element"
RULE_INTERNAL = "internal_error"


class SyntaxValidator:
    """Reports well-formedness of a document and nothing else."""

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        correlation_id: Optional[str] = None,
        builder: Optional[XMLTreeBuilder] = None
    ) -> None:
        """Initialize syntax validator.

        Args:
            config: Editor configuration (locale, input limits)
            correlation_id: Optional correlation ID for session tracking
            builder: Parser adapter to use; a new one is created if omitted
        """
        self.config = config or EditorConfig()
        self.messages = MessageCatalog(self.config.locale)
        self.builder = builder or XMLTreeBuilder(self.config.global_, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "syntax_validator")

    def validate(self, text: str) -> ValidationReport:
        """Check that ``text`` is well-formed XML.

        Returns:
            Report with exactly one message, success or error
        """
        start_time = time.time()
        try:
            result = self.builder.parse(text)
            if result.success:
                report = ValidationReport.single(
                    MessageKind.SUCCESS, self.messages.get("syntax_valid"), RULE_PARSE
                )
            else:
                message = result.error.message if result.error else ""
                report = ValidationReport.single(
                    MessageKind.ERROR,
                    message or self.messages.get("syntax_error_fallback"),
                    RULE_PARSE
                )
        except Exception as e:
            self.logger.error("Syntax validation failed unexpectedly")
            detail = str(e)
            text_out = (
                self.messages.get("syntax_unexpected", detail=detail) if detail
                else self.messages.get("syntax_error_fallback")
            )
            report = ValidationReport.single(MessageKind.ERROR, text_out, RULE_INTERNAL)

        report.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self.logger.info(
            "Syntax validation completed",
            extra={"success": report.success, "processing_time_ms": report.processing_time_ms}
        )
        return report


class ProfileValidator:
    """Checks a document against the element rules of a profile.

    Checks run in a fixed order: parse, root element name (stops on failure),
    root namespace, then the requirement tree. For every element the missing
    direct requirements are reported first, in declaration order, before
    descending into the requirements that are present.

    Requirements match direct children by local name only. A required
    element buried deeper, such as a ``body`` inside an unexpected wrapper,
    counts as missing unless the profile lists the wrapper as an
    alternative (the TEI preset accepts ``group`` in place of ``body``).
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        correlation_id: Optional[str] = None,
        builder: Optional[XMLTreeBuilder] = None
    ) -> None:
        """Initialize profile validator.

        Args:
            config: Editor configuration; its profile section drives the rules
            correlation_id: Optional correlation ID for session tracking
            builder: Parser adapter to use; a new one is created if omitted
        """
        self.config = config or EditorConfig()
        self.profile: ProfileConfig = self.config.profile
        self.messages = MessageCatalog(self.config.locale)
        self.builder = builder or XMLTreeBuilder(self.config.global_, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "profile_validator")

    def validate(self, text: str) -> ValidationReport:
        """Parse ``text`` and check it against the profile.

        Returns:
            Report with the ordered errors, or exactly one success message
        """
        start_time = time.time()
        self.logger.info(
            "Starting profile validation",
            extra={"profile": self.profile.name, "document_length": len(text)}
        )

        try:
            result = self.builder.parse(text)
            if not result.success:
                detail = str(result.error) if result.error else self.messages.get(
                    "syntax_error_fallback"
                )
                report = ValidationReport.single(
                    MessageKind.ERROR,
                    self.messages.get(
                        "profile_parse_error", profile=self.profile.name, detail=detail
                    ),
                    RULE_PARSE
                )
            else:
                report = self.validate_document(result.document)
        except Exception as e:
            self.logger.error("Profile validation failed unexpectedly")
            report = ValidationReport.single(
                MessageKind.ERROR,
                self.messages.get(
                    "profile_unexpected", profile=self.profile.name, detail=str(e) or type(e).__name__
                ),
                RULE_INTERNAL
            )

        report.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self.logger.info(
            "Profile validation completed",
            extra={
                "success": report.success,
                "error_count": report.error_count,
                "processing_time_ms": report.processing_time_ms,
            }
        )
        return report

    def validate_document(self, document: XMLDocument) -> ValidationReport:
        """Check an already parsed document against the profile."""
        report = ValidationReport()
        root = document.root

        if root is None or root.local_name != self.profile.root_tag:
            report.add_error(
                self.messages.get("root_mismatch", root=self.profile.root_tag),
                rule_id=RULE_ROOT,
                element_path="/"
            )
            return report

        root_path = f"/{root.tag}"
        if root.namespace != self.profile.namespace:
            report.add_error(
                self.messages.get("namespace_mismatch", profile=self.profile.name),
                rule_id=RULE_NAMESPACE,
                element_path=root_path
            )

        self._check_requirements(root, self.profile.requirements, report, root_path, top_level=True)

        if not report.error_count:
            report.add_success(self.messages.get("profile_valid", profile=self.profile.name))
        return report

    def _find_required(
        self,
        element: XMLElement,
        requirement: RequiredElement
    ) -> Optional[XMLElement]:
        for tag in requirement.accepted_tags:
            child = element.find_child(tag)
            if child is not None:
                return child
        return None

    def _check_requirements(
        self,
        element: XMLElement,
        requirements: Sequence[RequiredElement],
        report: ValidationReport,
        path: str,
        top_level: bool = False
    ) -> None:
        present = []
        for requirement in requirements:
            child = self._find_required(element, requirement)
            if child is None:
                if top_level:
                    text = self.messages.get("missing_child", child=requirement.tag)
                else:
                    text = self.messages.get(
                        "missing_child_in", child=requirement.tag, parent=element.local_name
                    )
                report.add_error(text, rule_id=RULE_REQUIRED, element_path=path)
            elif child.local_name == requirement.tag:
                present.append((requirement, child))

        for requirement, child in present:
            if requirement.children:
                self._check_requirements(
                    child, requirement.children, report, f"{path}/{child.tag}"
                )
