"""Allow-list based sanitization for untrusted CSS.

This package provides the components for filtering user-supplied styles:
- SanitizerConfig: Allow-lists, length cap and URL hooks
- PropertySanitizer: Filters individual declarations
- StructuralScanner: Tracks rule nesting and at-rule context
- CssSanitizer: Entry point tying the above together
"""

from cssguard.config import (
    DEFAULT_ALLOWED_AT_RULES,
    DEFAULT_ALLOWED_PROPERTIES,
    DEFAULT_ALLOWED_PSEUDO_CLASSES,
    DEFAULT_MAX_LENGTH,
    SanitizerConfig,
    SanitizerOverrides,
)
from cssguard.errors import DropLog, DropReason
from cssguard.properties import Declaration, PropertySanitizer
from cssguard.sanitizer import (
    CssSanitizer,
    get_default_sanitizer,
    reset_default_sanitizer,
    sanitize_css,
    sanitize_inline_style,
)
from cssguard.scanner import ScanContext, ScanState, Segment, SegmentKind, StructuralScanner
from cssguard.urls import (
    DEFAULT_ALLOWED_URL_HOSTS,
    UrlPolicy,
    default_sanitize_url,
    default_validate_url,
    host_allowlist,
)

__all__ = [
    # Configuration
    "DEFAULT_ALLOWED_AT_RULES",
    "DEFAULT_ALLOWED_PROPERTIES",
    "DEFAULT_ALLOWED_PSEUDO_CLASSES",
    "DEFAULT_MAX_LENGTH",
    "SanitizerConfig",
    "SanitizerOverrides",
    # URL hooks
    "DEFAULT_ALLOWED_URL_HOSTS",
    "UrlPolicy",
    "default_sanitize_url",
    "default_validate_url",
    "host_allowlist",
    # Drops
    "DropLog",
    "DropReason",
    # Declarations
    "Declaration",
    "PropertySanitizer",
    # Scanner
    "ScanContext",
    "ScanState",
    "Segment",
    "SegmentKind",
    "StructuralScanner",
    # Entry points
    "CssSanitizer",
    "get_default_sanitizer",
    "reset_default_sanitizer",
    "sanitize_css",
    "sanitize_inline_style",
]
