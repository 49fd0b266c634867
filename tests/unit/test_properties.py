"""Tests for per-declaration sanitization."""

import pytest

from cssguard.config import SanitizerConfig
from cssguard.errors import DropLog, DropReason
from cssguard.properties import Declaration, PropertySanitizer

GOOGLE_FONTS_URL = "https://fonts.googleapis.com/css?family=Roboto"


@pytest.fixture
def properties():
    """Create a property sanitizer that also allows background-image."""
    return PropertySanitizer(SanitizerConfig.build(allowed_properties={"background-image"}))


class TestDeclaration:
    """Tests for Declaration.parse."""

    def test_parse_simple(self):
        """Property and value are split and trimmed."""
        assert Declaration.parse("  color :  red ") == Declaration("color", "red")

    def test_parse_keeps_later_colons(self):
        """Only the first colon separates property from value."""
        declaration = Declaration.parse(f"background: url({GOOGLE_FONTS_URL})")

        assert declaration.property == "background"
        assert declaration.value == f"url({GOOGLE_FONTS_URL})"

    def test_parse_without_colon(self):
        """A chunk without a colon has an empty value."""
        assert Declaration.parse("color") == Declaration("color", "")


class TestSanitizeProperty:
    """Tests for PropertySanitizer.sanitize."""

    def test_allowed_property(self, properties):
        """Allowed properties are emitted byte-for-byte."""
        assert properties.sanitize("color", "red") == "color: red;"

    def test_property_name_is_trimmed(self, properties):
        """Whitespace around the property name is ignored."""
        assert properties.sanitize("  margin ", "0 auto") == "margin: 0 auto;"

    @pytest.mark.parametrize("prop", ["behavior", "-moz-binding", "Color", "list-style-image", ""])
    def test_disallowed_property(self, properties, prop):
        """Properties outside the allow-list are dropped."""
        assert properties.sanitize(prop, "url(x.htc)") == ""

    def test_disallowed_property_recorded(self, properties):
        """The drop reason is recorded."""
        drops = DropLog()

        properties.sanitize("behavior", "url(x.htc)", drops)

        assert drops.counts == {DropReason.DISALLOWED_PROPERTY.value: 1}

    @pytest.mark.parametrize("prop", ["background", "background-image"])
    def test_background_allowed_url(self, properties, prop):
        """Background URLs on the allowed host are re-quoted and kept."""
        result = properties.sanitize(prop, f"url('{GOOGLE_FONTS_URL}')")

        assert result == f"{prop}: url('{GOOGLE_FONTS_URL}');"

    def test_background_double_quoted_url(self, properties):
        """Double quotes are replaced with single quotes."""
        result = properties.sanitize("background", f'url("{GOOGLE_FONTS_URL}") no-repeat')

        assert result == f"background: url('{GOOGLE_FONTS_URL}');"

    @pytest.mark.parametrize("prop", ["background", "background-image"])
    def test_background_disallowed_origin(self, properties, prop):
        """Background URLs on other hosts drop the declaration."""
        drops = DropLog()

        assert properties.sanitize(prop, "url('https://evil.example/x.css')", drops) == ""
        assert drops.counts == {DropReason.DISALLOWED_URL_ORIGIN.value: 1}

    def test_background_invalid_url(self, properties):
        """Relative URLs fail validation and drop the declaration."""
        drops = DropLog()

        assert properties.sanitize("background", "url(/images/bg.png)", drops) == ""
        assert drops.counts == {DropReason.INVALID_URL.value: 1}

    def test_background_javascript_url(self, properties):
        """A javascript: URL is well formed but has no allowed host."""
        assert properties.sanitize("background", "url('javascript:alert(1)')") == ""

    def test_background_without_url_falls_through(self, properties):
        """Backgrounds without url(...) are emitted without URL checks."""
        assert properties.sanitize("background", "#fff") == "background: #fff;"
        assert (
            properties.sanitize("background", "linear-gradient(red, blue)")
            == "background: linear-gradient(red, blue);"
        )

    def test_url_in_other_property_is_not_checked(self, properties):
        """Only background properties get URL vetting."""
        result = properties.sanitize("content", "url('https://evil.example/x.png')")

        assert result == "content: url('https://evil.example/x.png');"

    def test_background_image_not_allowed_by_default(self):
        """background-image must be added to the allow-list explicitly."""
        properties = PropertySanitizer(SanitizerConfig.build())

        assert properties.sanitize("background-image", f"url('{GOOGLE_FONTS_URL}')") == ""


class TestUrlHooks:
    """Tests for pluggable URL hooks."""

    def test_custom_sanitize_url(self):
        """A custom hook can rewrite the URL."""
        config = SanitizerConfig.build(
            sanitize_url=lambda url: url.replace("http://", "https://"),
        )
        properties = PropertySanitizer(config)

        result = properties.sanitize("background", "url(http://cdn.example.com/a.png)")

        assert result == "background: url('https://cdn.example.com/a.png');"

    def test_custom_validate_url(self):
        """A custom validator can reject URLs the default would accept."""
        config = SanitizerConfig.build(validate_url=lambda url: url.startswith("https://"))
        properties = PropertySanitizer(config)

        assert properties.sanitize("background", "url(http://fonts.googleapis.com/css)") == ""

    def test_raising_hook_drops_declaration(self):
        """A hook that raises is treated as a rejection."""

        def broken(url):
            raise RuntimeError("boom")

        drops = DropLog()
        properties = PropertySanitizer(SanitizerConfig.build(sanitize_url=broken))

        assert properties.sanitize("background", f"url({GOOGLE_FONTS_URL})", drops) == ""
        assert drops.counts == {DropReason.URL_HOOK_FAILED.value: 1}

    def test_non_callable_hook_drops_declaration(self):
        """A non-callable hook fails only when it is used."""
        properties = PropertySanitizer(SanitizerConfig.build(validate_url="nope"))

        assert properties.sanitize("background", f"url({GOOGLE_FONTS_URL})") == ""
        assert properties.sanitize("color", "red") == "color: red;"


class TestSanitizeBlock:
    """Tests for PropertySanitizer.sanitize_block."""

    def test_block(self, properties):
        """Survivors are joined by a single space."""
        body = " color: red; behavior: url(x.htc);; margin: 0 ;  "

        assert properties.sanitize_block(body) == "color: red; margin: 0;"

    def test_empty_block(self, properties):
        """An empty or whitespace-only body yields nothing."""
        assert properties.sanitize_block("") == ""
        assert properties.sanitize_block("  ;  ; ") == ""

    def test_block_with_url(self, properties):
        """Colons inside url() do not split the declaration."""
        body = f"background: url({GOOGLE_FONTS_URL}); color: blue"

        assert properties.sanitize_block(body) == (
            f"background: url('{GOOGLE_FONTS_URL}'); color: blue;"
        )
