"""Per-declaration filtering.

A declaration survives only if its property is allow-listed. Background
declarations that reference a ``url(...)`` are additionally checked against
the configured URL hooks. Values of every other allowed property are emitted
verbatim.
"""

import re
from typing import NamedTuple

import structlog

from cssguard.config import SanitizerConfig
from cssguard.errors import DropLog, DropReason

logger = structlog.get_logger()

URL_PATTERN = re.compile(r"""url\(['"]?(.*?)['"]?\)""")

URL_CHECKED_PROPERTIES = {"background", "background-image"}


class Declaration(NamedTuple):
    """A single ``property: value`` pair from a rule body."""

    property: str
    value: str

    @classmethod
    def parse(cls, chunk: str) -> "Declaration":
        """Split a raw chunk on its first colon.

        Later colons stay in the value, so ``url(https://...)`` is kept whole.
        """
        prop, _, value = chunk.partition(":")
        return cls(prop.strip(), value.strip())


class PropertySanitizer:
    """Filters declarations against a SanitizerConfig."""

    def __init__(self, config: SanitizerConfig):
        self.config = config

    def sanitize(self, prop: str, value: str, drops: DropLog | None = None) -> str:
        """Sanitize a single declaration.

        Args:
            prop: The property name.
            value: The raw property value.
            drops: Optional collector for drop reasons.

        Returns:
            ``"<property>: <value>;"`` or an empty string if the declaration
            was dropped.
        """
        drops = drops if drops is not None else DropLog()
        prop = prop.strip()

        if prop not in self.config.allowed_properties:
            drops.record(DropReason.DISALLOWED_PROPERTY, property=prop)
            return ""

        if prop in URL_CHECKED_PROPERTIES:
            url_match = URL_PATTERN.search(value)
            # Backgrounds without url(...) fall through to plain emission
            if url_match:
                sanitized_url = self._vet_url(url_match.group(1), prop, drops)
                if not sanitized_url:
                    return ""
                return f"{prop}: url('{sanitized_url}');"

        return f"{prop}: {value};"

    def sanitize_block(self, body: str, drops: DropLog | None = None) -> str:
        """Sanitize a semicolon-separated declaration block.

        Args:
            body: Text between a rule's braces (or an inline style attribute).
            drops: Optional collector for drop reasons.

        Returns:
            Surviving declarations joined by single spaces.
        """
        sanitized = []
        for chunk in body.split(";"):
            if not chunk.strip():
                continue
            declaration = Declaration.parse(chunk)
            result = self.sanitize(declaration.property, declaration.value, drops)
            if result:
                sanitized.append(result)

        return " ".join(sanitized)

    def _vet_url(self, url: str, prop: str, drops: DropLog) -> str:
        try:
            if not self.config.validate_url(url):
                drops.record(DropReason.INVALID_URL, property=prop)
                return ""

            sanitized_url = self.config.sanitize_url(url)
        except Exception as e:
            logger.warning(
                "URL hook failed, dropping declaration",
                property=prop,
                error=str(e),
                exc_info=True,
            )
            drops.record(DropReason.URL_HOOK_FAILED, property=prop)
            return ""

        if not sanitized_url:
            drops.record(DropReason.DISALLOWED_URL_ORIGIN, property=prop)
            return ""

        return sanitized_url
