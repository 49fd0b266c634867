"""Single-pass structural scanner for untrusted CSS.

The scanner walks the text one character at a time and only reacts to braces.
Everything between two braces is collected in a buffer, and what happens to
that buffer depends on the structural context the brace closes or opens:

- TOP_LEVEL: outside any block. A ``{`` here opens a rule (or an allowed
  at-rule); the pending selector is emitted verbatim.
- RULE_BODY: inside a top-level rule. The closing ``}`` sends the body
  through the property sanitizer.
- AT_RULE: inside an allowed at-rule at any depth. Heads and bodies are
  emitted verbatim, declarations included.
- NESTED_BLOCK: a block opened inside a rule body without an allowed
  at-rule. Its head is discarded.

Transitions:
- TOP_LEVEL --{--> RULE_BODY, or AT_RULE if the head names an allowed at-rule
- RULE_BODY --{--> NESTED_BLOCK, or AT_RULE if the head names an allowed at-rule
- RULE_BODY --}--> TOP_LEVEL
- NESTED_BLOCK --}--> RULE_BODY (or a shallower NESTED_BLOCK)
- AT_RULE --}--> TOP_LEVEL once the nest level returns to 0
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

import structlog

from cssguard.config import SanitizerConfig
from cssguard.errors import DropLog, DropReason
from cssguard.properties import PropertySanitizer

logger = structlog.get_logger()

COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)


class ScanContext(str, Enum):
    """Structural context of the scanner."""

    TOP_LEVEL = "top_level"
    RULE_BODY = "rule_body"
    AT_RULE = "at_rule"
    NESTED_BLOCK = "nested_block"


class SegmentKind(str, Enum):
    """How a piece of output was produced."""

    VERBATIM = "verbatim"  # Selectors, at-rule heads and at-rule bodies
    FILTERED = "filtered"  # Rule bodies rebuilt by the property sanitizer
    DISCARDED = "discarded"  # Dropped by the structural policy, never output


class Segment(NamedTuple):
    """A context-tagged piece of scanner output."""

    kind: SegmentKind
    text: str


@dataclass
class ScanState:
    """Mutable state for one scan. Never shared between calls."""

    nest_level: int = 0
    in_at_rule: bool = False
    current_at_rule: str = ""
    buffer: list[str] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)

    @property
    def context(self) -> ScanContext:
        if self.in_at_rule:
            return ScanContext.AT_RULE
        if self.nest_level == 0:
            return ScanContext.TOP_LEVEL
        if self.nest_level == 1:
            return ScanContext.RULE_BODY
        return ScanContext.NESTED_BLOCK

    def take_buffer(self) -> str:
        text = "".join(self.buffer)
        self.buffer.clear()
        return text

    def emit(self, kind: SegmentKind, text: str) -> None:
        self.segments.append(Segment(kind, text))

    def enter_at_rule(self, name: str) -> None:
        self.in_at_rule = True
        self.current_at_rule = name

    def exit_at_rule(self) -> None:
        self.in_at_rule = False
        self.current_at_rule = ""


def normalize(css: object, max_length: int, drops: DropLog) -> str:
    """Prepare raw input for scanning.

    Non-string input is rejected. The text is stripped, cut to at most
    ``max_length`` characters (even mid-token) and stripped of comments.
    """
    if not isinstance(css, str):
        drops.record(DropReason.REJECTED_INPUT, input_type=type(css).__name__)
        return ""

    css = css.strip()
    if not css:
        return ""

    if len(css) > max_length:
        logger.warning(
            "CSS input truncated",
            original_length=len(css),
            max_length=max_length,
        )
        drops.record(DropReason.OVERSIZED_INPUT, original_length=len(css))
        css = css[:max_length]

    return COMMENT_PATTERN.sub("", css)


class StructuralScanner:
    """Walks rule nesting and routes declaration bodies to the property sanitizer."""

    def __init__(self, config: SanitizerConfig, properties: PropertySanitizer | None = None):
        self.config = config
        self.properties = properties or PropertySanitizer(config)

    def scan(self, css: object, drops: DropLog | None = None) -> list[Segment]:
        """Scan CSS text into context-tagged segments.

        Args:
            css: Raw, untrusted CSS text.
            drops: Optional collector for drop reasons.

        Returns:
            Segments in input order. Joining the non-discarded ones gives the
            sanitized CSS.
        """
        drops = drops if drops is not None else DropLog()
        css = normalize(css, self.config.max_length, drops)
        state = ScanState()

        for char in css:
            if char == "{":
                self._open_block(state, drops)
            elif char == "}":
                self._close_block(state, drops)
            else:
                state.buffer.append(char)

        # Unbalanced input is not reported; trailing text has no closing brace
        trailing = state.take_buffer()
        if trailing.strip():
            state.emit(SegmentKind.DISCARDED, trailing)

        return state.segments

    def sanitize(self, css: object, drops: DropLog | None = None) -> str:
        """Scan CSS text and return the sanitized output."""
        return render(self.scan(css, drops))

    def _open_block(self, state: ScanState, drops: DropLog) -> None:
        state.nest_level += 1
        head = state.take_buffer()
        tokens = head.split()
        rule_name = tokens[0] if tokens else ""

        if rule_name in self.config.allowed_at_rules:
            state.enter_at_rule(rule_name)
            state.emit(SegmentKind.VERBATIM, head + "{")
        elif state.context in (ScanContext.AT_RULE, ScanContext.RULE_BODY):
            state.emit(SegmentKind.VERBATIM, head + "{")
        else:
            drops.record(DropReason.DISALLOWED_STRUCTURAL_CONTEXT, head=head.strip()[:50])
            state.emit(SegmentKind.DISCARDED, head + "{")

    def _close_block(self, state: ScanState, drops: DropLog) -> None:
        # Stray closing braces at the top level do not drive the level negative
        state.nest_level = max(state.nest_level - 1, 0)
        body = state.take_buffer()
        context = state.context

        if context == ScanContext.AT_RULE:
            if state.nest_level == 0:
                state.exit_at_rule()
            state.emit(SegmentKind.VERBATIM, body + "}")
        elif context == ScanContext.TOP_LEVEL:
            state.emit(SegmentKind.FILTERED, self.properties.sanitize_block(body, drops) + "}")
        else:
            state.emit(SegmentKind.VERBATIM, body + "}")


def render(segments: list[Segment]) -> str:
    """Join the output-bearing segments into CSS text."""
    return "".join(
        segment.text for segment in segments if segment.kind != SegmentKind.DISCARDED
    )
