"""URL vetting hooks used for background images.

A sanitizer takes two plain callables: one that checks a URL is structurally
well formed and one that returns the URL when its origin is acceptable (or an
empty string otherwise). The defaults here allow Google Fonts only.
"""

import re
from typing import Callable, Protocol
from urllib.parse import urlsplit

import structlog

logger = structlog.get_logger()

DEFAULT_ALLOWED_URL_HOSTS = ("fonts.googleapis.com",)

# RFC 3986 scheme
SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# Schemes that are meaningless without a host
HOST_REQUIRED_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

# Browsers read a backslash as a slash in web URLs; urlsplit does not, so
# "https://evil.example\@fonts.googleapis.com" would report the wrong host
BACKSLASH = "\\"


class UrlPolicy(Protocol):
    """Capability for vetting URLs found in declaration values."""

    def validate_url(self, url: str) -> bool:
        """Return True if the URL is structurally well formed."""
        ...

    def sanitize_url(self, url: str) -> str:
        """Return the URL if its origin is allowed, else an empty string."""
        ...


def default_validate_url(url: str) -> bool:
    """Check that a URL is absolute and parseable.

    Opaque URLs such as ``javascript:alert(1)`` are well formed and pass;
    rejecting them is the job of the origin check.

    Args:
        url: The URL captured from a ``url(...)`` value.

    Returns:
        True if the URL has a scheme (and a host where the scheme needs one).
    """
    if not url or BACKSLASH in url:
        return False

    try:
        parts = urlsplit(url)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False

    if not parts.scheme or not SCHEME_PATTERN.match(parts.scheme):
        return False

    if parts.scheme.lower() in HOST_REQUIRED_SCHEMES and not parts.hostname:
        return False

    return True


def _hostname(url: str) -> str | None:
    if BACKSLASH in url:
        return None
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def host_allowlist(*hosts: str) -> Callable[[str], str]:
    """Build a ``sanitize_url`` hook that only accepts the given hosts.

    Args:
        hosts: Allowed hostnames, compared case-insensitively.

    Returns:
        A callable returning the URL unchanged when its host is allowed,
        otherwise an empty string.
    """
    allowed = frozenset(host.lower() for host in hosts)

    def sanitize_url(url: str) -> str:
        if not url:
            return ""
        hostname = _hostname(url)
        if hostname and hostname in allowed:
            return url
        logger.debug("URL origin not allowed", hostname=hostname)
        return ""

    return sanitize_url


default_sanitize_url = host_allowlist(*DEFAULT_ALLOWED_URL_HOSTS)
