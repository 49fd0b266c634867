"""CSS sanitizer entry points.

Usage:
    sanitizer = CssSanitizer(allowed_properties={"background-image"})
    safe_css = sanitizer.sanitize(page.custom_css)

Module-level helpers use a shared instance configured from CSSGUARD_*
environment variables.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from cssguard.config import SanitizerConfig, SanitizerOverrides
from cssguard.errors import DropLog
from cssguard.properties import PropertySanitizer
from cssguard.scanner import Segment, StructuralScanner, normalize, render
from cssguard.urls import UrlPolicy

logger = structlog.get_logger()


class CssSanitizer:
    """Allow-list based sanitizer for untrusted CSS.

    The configuration is frozen at construction, so one instance can be
    shared across threads.
    """

    def __init__(
        self,
        overrides: SanitizerOverrides | Mapping[str, Any] | None = None,
        *,
        config: SanitizerConfig | None = None,
        url_policy: UrlPolicy | None = None,
        **kwargs: Any,
    ):
        """Initialize the sanitizer.

        Args:
            overrides: Configuration overrides merged with the defaults.
            config: A prebuilt configuration, used as-is instead of merging.
            url_policy: Object providing both URL hooks; explicit hook
                overrides win over it.
            **kwargs: Overrides as keyword arguments.
        """
        if url_policy is not None:
            kwargs.setdefault("validate_url", url_policy.validate_url)
            kwargs.setdefault("sanitize_url", url_policy.sanitize_url)

        self.config = config or SanitizerConfig.build(overrides, **kwargs)
        self._properties = PropertySanitizer(self.config)
        self._scanner = StructuralScanner(self.config, self._properties)

    def sanitize(self, css: object, log_blocked: bool = True) -> str:
        """Sanitize a stylesheet.

        Args:
            css: Raw CSS text. Anything that is not a string yields "".
            log_blocked: Whether to log a summary when content was dropped.

        Returns:
            Sanitized CSS, or an empty string if nothing survived.
        """
        drops = DropLog()
        sanitized = render(self._scanner.scan(css, drops))

        if drops and log_blocked:
            logger.warning(
                "Dropped disallowed CSS",
                drops=drops.counts,
                original_length=len(css) if isinstance(css, str) else 0,
                sanitized_length=len(sanitized),
            )

        return sanitized

    def scan(self, css: object) -> list[Segment]:
        """Scan a stylesheet into verbatim, filtered and discarded segments."""
        return self._scanner.scan(css)

    def sanitize_property(self, prop: str, value: str) -> str:
        """Sanitize one declaration, e.g. ``("color", "red")`` -> ``"color: red;"``."""
        return self._properties.sanitize(prop, value)

    def sanitize_inline_style(self, style: object, log_blocked: bool = True) -> str:
        """Sanitize an inline ``style`` attribute value.

        The whole value is one declaration block; braces have no structural
        meaning here and end up inside declaration values.

        Args:
            style: Raw attribute value.
            log_blocked: Whether to log a summary when content was dropped.

        Returns:
            Sanitized declarations joined by spaces.
        """
        drops = DropLog()
        style = normalize(style, self.config.max_length, drops)
        sanitized = self._properties.sanitize_block(style, drops)

        if drops and log_blocked:
            logger.warning(
                "Dropped disallowed inline style",
                drops=drops.counts,
                sanitized_length=len(sanitized),
            )

        return sanitized


_default_sanitizer: CssSanitizer | None = None


def get_default_sanitizer() -> CssSanitizer:
    """Get the shared sanitizer configured from the environment."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = CssSanitizer(config=SanitizerConfig.from_env())
    return _default_sanitizer


def reset_default_sanitizer() -> None:
    """Drop the shared sanitizer so the next call re-reads the environment."""
    global _default_sanitizer
    _default_sanitizer = None


def sanitize_css(css: object, log_blocked: bool = True) -> str:
    """Sanitize a stylesheet with the shared sanitizer."""
    return get_default_sanitizer().sanitize(css, log_blocked=log_blocked)


def sanitize_inline_style(style: object, log_blocked: bool = True) -> str:
    """Sanitize an inline style attribute with the shared sanitizer."""
    return get_default_sanitizer().sanitize_inline_style(style, log_blocked=log_blocked)
