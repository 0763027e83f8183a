"""Localized user-facing message catalog.

Every message the core hands to the presentation layer is looked up here by
key, so validators never embed literal wording.
"""

from typing import Any, Dict

DEFAULT_LOCALE = "en"

CATALOG: Dict[str, Dict[str, str]] = {
    "en": {
        "empty_document": "Document is empty",
        "input_too_large": "Document exceeds the maximum size of {limit} bytes",
        "encoding_mismatch": "The declared encoding {encoding} does not match the document text",
        "syntax_valid": "The XML syntax is valid",
        "syntax_error_fallback": "XML parsing error",
        "syntax_unexpected": "XML parsing error: {detail}",
        "profile_parse_error": "{profile} validation error: {detail}",
        "root_mismatch": "The root element must be <{root}>",
        "namespace_mismatch": "{profile} namespace missing or incorrect",
        "missing_child": "Missing <{child}> element",
        "missing_child_in": "Missing <{child}> element in <{parent}>",
        "profile_valid": "The document conforms to the {profile} profile",
        "profile_unexpected": "Error during {profile} validation: {detail}",
        "format_requires_valid_syntax": "Fix the XML syntax errors before formatting",
        "format_success": "Document formatted successfully",
        "format_unexpected": "Formatting failed: {detail}",
    },
    "it": {
        "empty_document": "Il documento è vuoto",
        "input_too_large": "Il documento supera la dimensione massima di {limit} byte",
        "encoding_mismatch": "La codifica dichiarata {encoding} non corrisponde al testo del documento",
        "syntax_valid": "La sintassi XML è valida",
        "syntax_error_fallback": "Errore di parsing XML",
        "syntax_unexpected": "Errore di parsing XML: {detail}",
        "profile_parse_error": "Errore durante la validazione {profile}: {detail}",
        "root_mismatch": "L'elemento radice deve essere <{root}>",
        "namespace_mismatch": "Namespace {profile} mancante o non corretto",
        "missing_child": "Elemento <{child}> mancante",
        "missing_child_in": "Elemento <{child}> mancante in {parent}",
        "profile_valid": "Il documento è conforme alle specifiche {profile}",
        "profile_unexpected": "Errore durante la validazione {profile}: {detail}",
        "format_requires_valid_syntax": "Correggi prima gli errori di sintassi XML",
        "format_success": "Documento formattato correttamente",
        "format_unexpected": "Formattazione non riuscita: {detail}",
    },
}

SUPPORTED_LOCALES = tuple(sorted(CATALOG))


class MessageCatalog:
    """Looks up message templates for one locale.

    Keys missing from a non-default locale fall back to the default locale.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        if locale not in CATALOG:
            raise ValueError(f"locale must be one of {list(SUPPORTED_LOCALES)}")
        self.locale = locale
        self._templates = CATALOG[locale]

    def get(self, key: str, **params: Any) -> str:
        """Render the message for ``key`` with ``params`` substituted."""
        template = self._templates.get(key)
        if template is None:
            template = CATALOG[DEFAULT_LOCALE][key]
        return template.format(**params)
