"""Sanitizer configuration: allow-lists, length cap and URL hooks.

Caller overrides are merged with the built-in defaults. Allow-lists are
additive (the defaults can never be narrowed by an override), scalar options
replace the default wholesale.
"""

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field, SkipValidation
from pydantic.alias_generators import to_camel

from cssguard.urls import default_sanitize_url, default_validate_url

logger = structlog.get_logger()

DEFAULT_MAX_LENGTH = 65536  # 64 KB

DEFAULT_ALLOWED_PROPERTIES = frozenset({
    'color', 'font-family', 'font-size', 'font-weight', 'line-height', 'text-align',
    'text-decoration', 'text-transform', 'letter-spacing', 'display', 'width', 'height',
    'max-width', 'max-height', 'min-width', 'min-height', 'margin', 'padding', 'border',
    'background-color', 'opacity', 'box-shadow', 'transform', 'transition', 'background',
    'animation', 'animation-delay', 'animation-direction', 'animation-duration',
    'animation-fill-mode', 'animation-iteration-count', 'animation-name',
    'animation-play-state', 'animation-timing-function', 'cursor', 'pointer-events',
    'user-select', 'visibility', 'word-break', 'word-wrap', 'overflow', 'text-overflow',
    'clip-path', 'filter', 'position', 'top', 'right', 'bottom', 'left', 'z-index', 'float',
    'clear', 'object-fit', 'object-position', 'content', 'overflow-x', 'overflow-y',
    'text-shadow', 'vertical-align', 'white-space', 'border-radius', 'justify-content',
    'align-items', 'flex-wrap', 'flex-direction', 'flex',
})

DEFAULT_ALLOWED_AT_RULES = frozenset({'@media', '@keyframes', '@font-face', '@import'})

# Not consulted by the scanner; kept so callers can rely on it later
DEFAULT_ALLOWED_PSEUDO_CLASSES = frozenset({
    ':hover', ':active', ':focus', ':visited', ':first-child', ':last-child',
    ':nth-child', ':nth-of-type', ':not', ':before', ':after',
})

# Environment variables read by SanitizerConfig.from_env()
ENV_MAX_LENGTH = "CSSGUARD_MAX_LENGTH"
ENV_EXTRA_PROPERTIES = "CSSGUARD_EXTRA_PROPERTIES"
ENV_EXTRA_AT_RULES = "CSSGUARD_EXTRA_AT_RULES"


class SanitizerOverrides(PydanticBaseModel):
    """Caller-supplied configuration overrides.

    Accepts snake_case or camelCase keys, so theme settings stored as JSON
    can be passed straight through. URL hooks are not validated; a broken
    hook only fails when the sanitizer calls it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    max_length: int | None = Field(None, description="Hard cap on input length")
    allowed_properties: frozenset[str] | None = None
    allowed_at_rules: frozenset[str] | None = None
    allowed_pseudo_classes: frozenset[str] | None = None
    validate_url: SkipValidation[Callable[[str], bool] | None] = None
    sanitize_url: SkipValidation[Callable[[str], str] | None] = None


@dataclass(frozen=True)
class SanitizerConfig:
    """Immutable configuration for a CssSanitizer instance."""

    max_length: int = DEFAULT_MAX_LENGTH
    allowed_properties: frozenset[str] = DEFAULT_ALLOWED_PROPERTIES
    allowed_at_rules: frozenset[str] = DEFAULT_ALLOWED_AT_RULES
    allowed_pseudo_classes: frozenset[str] = DEFAULT_ALLOWED_PSEUDO_CLASSES
    validate_url: Callable[[str], bool] = field(default=default_validate_url)
    sanitize_url: Callable[[str], str] = field(default=default_sanitize_url)

    @classmethod
    def build(
        cls,
        overrides: SanitizerOverrides | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> "SanitizerConfig":
        """Merge overrides with the defaults.

        Args:
            overrides: Overrides as a model or a mapping (snake_case or camelCase keys).
            **kwargs: Extra overrides, applied on top of ``overrides``.

        Returns:
            The merged configuration.
        """
        parsed = _parse_overrides(overrides, kwargs)

        return cls(
            max_length=parsed.max_length if parsed.max_length is not None else DEFAULT_MAX_LENGTH,
            allowed_properties=_union(DEFAULT_ALLOWED_PROPERTIES, parsed.allowed_properties),
            allowed_at_rules=_union(DEFAULT_ALLOWED_AT_RULES, parsed.allowed_at_rules),
            allowed_pseudo_classes=_union(
                DEFAULT_ALLOWED_PSEUDO_CLASSES, parsed.allowed_pseudo_classes
            ),
            validate_url=parsed.validate_url if parsed.validate_url is not None else default_validate_url,
            sanitize_url=parsed.sanitize_url if parsed.sanitize_url is not None else default_sanitize_url,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "SanitizerConfig":
        """Build a configuration from CSSGUARD_* environment variables.

        Keyword overrides win over the environment for scalars and are
        unioned with it for allow-lists.
        """
        env_overrides: dict[str, Any] = {}

        max_length = os.environ.get(ENV_MAX_LENGTH)
        if max_length:
            try:
                env_overrides["max_length"] = int(max_length)
            except ValueError:
                logger.warning("Ignoring invalid max length", variable=ENV_MAX_LENGTH, value=max_length)

        extra_properties = _split_env_list(os.environ.get(ENV_EXTRA_PROPERTIES, ""))
        extra_at_rules = _split_env_list(os.environ.get(ENV_EXTRA_AT_RULES, ""))

        parsed = _parse_overrides(None, kwargs)
        if parsed.max_length is not None:
            env_overrides["max_length"] = parsed.max_length
        env_overrides["allowed_properties"] = extra_properties | (parsed.allowed_properties or frozenset())
        env_overrides["allowed_at_rules"] = extra_at_rules | (parsed.allowed_at_rules or frozenset())
        env_overrides["allowed_pseudo_classes"] = parsed.allowed_pseudo_classes
        env_overrides["validate_url"] = parsed.validate_url
        env_overrides["sanitize_url"] = parsed.sanitize_url

        return cls.build(env_overrides)


def _parse_overrides(
    overrides: SanitizerOverrides | Mapping[str, Any] | None,
    kwargs: Mapping[str, Any],
) -> SanitizerOverrides:
    if isinstance(overrides, SanitizerOverrides):
        if not kwargs:
            return overrides
        overrides = overrides.model_dump(exclude_none=True)

    data = dict(overrides or {})
    data.update(kwargs)
    return SanitizerOverrides.model_validate(data)


def _union(defaults: frozenset[str], extras: Iterable[str] | None) -> frozenset[str]:
    if not extras:
        return defaults
    return defaults | frozenset(extras)


def _split_env_list(value: str) -> frozenset[str]:
    return frozenset(item.strip() for item in value.split(",") if item.strip())
