"""Reasons a piece of CSS input was dropped during sanitization.

Nothing in cssguard raises to the caller. Every rejection degrades to
dropping the offending unit (declaration, block, or whole input), and the
reason is only surfaced through structured logs.
"""

from collections import Counter
from enum import Enum

import structlog

logger = structlog.get_logger()


class DropReason(str, Enum):
    """Why a unit of CSS input was dropped or altered."""

    REJECTED_INPUT = "rejected_input"
    OVERSIZED_INPUT = "oversized_input"
    DISALLOWED_PROPERTY = "disallowed_property"
    DISALLOWED_URL_ORIGIN = "disallowed_url_origin"
    INVALID_URL = "invalid_url"
    DISALLOWED_STRUCTURAL_CONTEXT = "disallowed_structural_context"
    URL_HOOK_FAILED = "url_hook_failed"


class DropLog:
    """Collects drop reasons for a single sanitize call."""

    def __init__(self) -> None:
        self._counts: Counter[DropReason] = Counter()

    def record(self, reason: DropReason, **context) -> None:
        """Record a drop and emit a debug event for it."""
        self._counts[reason] += 1
        logger.debug("CSS unit dropped", reason=reason.value, **context)

    @property
    def counts(self) -> dict[str, int]:
        return {reason.value: count for reason, count in self._counts.items()}

    def __bool__(self) -> bool:
        return bool(self._counts)
