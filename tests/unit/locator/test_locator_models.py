"""
Tests for ElementLocator and LocatorMetadata.
"""

import pytest

from auto_wiz.locator.models import MAX_TEXT_LENGTH, ElementLocator, LocatorMetadata


class TestLocatorMetadata:
    """Test the metadata record."""

    def test_text_trimmed_and_capped(self):
        """Text is trimmed and cut to the maximum length."""
        metadata = LocatorMetadata(text="  " + "x" * 80 + "  ")
        assert metadata.text == "x" * MAX_TEXT_LENGTH

    def test_blank_text_dropped(self):
        """Whitespace-only text becomes None."""
        assert LocatorMetadata(text="   ").text is None

    def test_to_dict_omits_unset(self):
        """Only set fields are serialized, with camelCase keys."""
        metadata = LocatorMetadata(test_id="go", aria_label="Go", tag_name="button")
        assert metadata.to_dict() == {"testId": "go", "ariaLabel": "Go", "tagName": "button"}

    def test_from_dict(self):
        """camelCase keys are read back."""
        metadata = LocatorMetadata.from_dict({"testId": "go", "role": "button", "text": "Go"})
        assert metadata.test_id == "go"
        assert metadata.role == "button"
        assert metadata.text == "Go"
        assert metadata.placeholder is None


class TestElementLocator:
    """Test the locator record."""

    def test_empty_primary_rejected(self):
        """A locator always has a primary selector."""
        with pytest.raises(ValueError):
            ElementLocator(primary="")

    def test_fallbacks_deduplicated(self):
        """Fallbacks never repeat each other or the primary."""
        locator = ElementLocator(primary="#a", fallbacks=["#a", "#b", "#b", "", "#c"])
        assert locator.fallbacks == ["#b", "#c"]

    def test_selectors_order(self):
        """Primary comes first, then fallbacks in order."""
        locator = ElementLocator(primary="#a", fallbacks=["#b", "#c"])
        assert locator.selectors() == ["#a", "#b", "#c"]

    def test_to_dict(self):
        """Serializes to the JSON shape used in flows."""
        locator = ElementLocator(
            primary='[data-testid="go"]',
            fallbacks=["button.cta"],
            metadata=LocatorMetadata(text="Go", tag_name="button"),
        )
        assert locator.to_dict() == {
            "primary": '[data-testid="go"]',
            "fallbacks": ["button.cta"],
            "metadata": {"text": "Go", "tagName": "button"},
        }

    def test_to_dict_without_metadata(self):
        """Metadata key is omitted when absent."""
        assert ElementLocator(primary="#a").to_dict() == {"primary": "#a", "fallbacks": []}

    def test_from_dict(self):
        """A stored locator is read back."""
        locator = ElementLocator.from_dict({
            "primary": "#save",
            "fallbacks": ["button.save"],
            "metadata": {"text": "Save", "role": "button"},
        })
        assert locator.primary == "#save"
        assert locator.fallbacks == ["button.save"]
        assert locator.metadata.text == "Save"
        assert locator.metadata.role == "button"

    def test_from_dict_missing_fallbacks(self):
        """Missing fallbacks and metadata default sensibly."""
        locator = ElementLocator.from_dict({"primary": "#save"})
        assert locator.fallbacks == []
        assert locator.metadata is None

    def test_from_dict_missing_primary(self):
        """A locator without primary is rejected."""
        with pytest.raises(KeyError):
            ElementLocator.from_dict({"fallbacks": ["#a"]})
