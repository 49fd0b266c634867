"""Pytest configuration and fixtures."""

import os

import pytest

# Start every session from the built-in defaults
for _name in ("CSSGUARD_MAX_LENGTH", "CSSGUARD_EXTRA_PROPERTIES", "CSSGUARD_EXTRA_AT_RULES"):
    os.environ.pop(_name, None)


@pytest.fixture(autouse=True)
def reset_default_sanitizer():
    """Make sure each test builds the shared sanitizer from its own environment."""
    from cssguard.sanitizer import reset_default_sanitizer as reset

    reset()
    yield
    reset()


@pytest.fixture
def sanitizer():
    """Create a sanitizer with the default configuration."""
    from cssguard import CssSanitizer

    return CssSanitizer()


@pytest.fixture
def background_image_sanitizer():
    """Create a sanitizer that also allows background-image."""
    from cssguard import CssSanitizer

    return CssSanitizer(allowed_properties={"background-image"})
