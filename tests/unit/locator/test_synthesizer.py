"""
Tests for locator generation.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from auto_wiz.exceptions import DomError
from auto_wiz.locator.synthesizer import (
    SelectorSynthesizer,
    generate_locator,
    generate_selector,
    is_stable_token,
    simple_selector,
    visible_text,
)


@pytest.fixture
def synthesizer():
    return SelectorSynthesizer()


class TestStableTokens:
    """Test the generated-token filter."""

    def test_hand_written_tokens(self):
        """Ordinary ids and classes are stable."""
        assert is_stable_token("submit-btn")
        assert is_stable_token("nav2")

    def test_hash_runs_rejected(self):
        """Eight or more hex characters in a row look generated."""
        assert not is_stable_token("css-1a2b3c4d5e")
        assert not is_stable_token("a1b2c3d4e5f6")

    def test_short_hex_allowed(self):
        """Shorter hex runs are not treated as hashes."""
        assert is_stable_token("btn-abc123")

    def test_underscore_prefix_rejected(self):
        """Leading underscores mark generated names."""
        assert not is_stable_token("_x1")

    def test_empty_rejected(self):
        assert not is_stable_token("")


class TestIdentityTier:
    """Test identity-tier selectors."""

    @pytest.mark.asyncio
    async def test_test_id_primary(self, synthesizer, make_document):
        """A data-testid becomes the primary selector."""
        document = make_document('<button data-testid="go">Go</button>')
        locator = await synthesizer.generate(await document.query_selector("button"))

        assert locator.primary == '[data-testid="go"]'
        assert locator.metadata.test_id == "go"
        assert locator.metadata.text == "Go"
        assert locator.metadata.tag_name == "button"
        assert locator.metadata.role == "button"

    @pytest.mark.asyncio
    async def test_identity_order(self, synthesizer, make_document):
        """Test id, then id, then name, then aria-label."""
        document = make_document(
            '<button id="submit" name="s" aria-label="Send" data-testid="send-btn">Send</button>'
        )
        locator = await synthesizer.generate(await document.query_selector("button"))

        assert locator.primary == '[data-testid="send-btn"]'
        assert locator.fallbacks[:3] == ["#submit", 'button[name="s"]', '[aria-label="Send"]']

    @pytest.mark.asyncio
    async def test_test_id_family(self, synthesizer, make_document):
        """The test-id attribute actually present is used in the selector."""
        document = make_document('<a data-cy="nav-home" href="/">Home</a>')
        locator = await synthesizer.generate(await document.query_selector("a"))

        assert locator.primary == '[data-cy="nav-home"]'
        assert locator.metadata.test_id == "nav-home"
        assert locator.metadata.role == "link"

    @pytest.mark.asyncio
    async def test_generated_id_skipped(self, synthesizer, make_document):
        """Hash-like ids never appear in any selector."""
        document = make_document('<div id="a1b2c3d4e5f6"><span>x</span></div>')
        locator = await synthesizer.generate(await document.query_selector("div"))

        for selector in locator.selectors():
            assert "a1b2c3d4e5f6" not in selector
        assert locator.primary == "html > body > div"

    @pytest.mark.asyncio
    async def test_special_characters_escaped(self, synthesizer, make_document):
        """Generated selectors select the element they came from."""
        document = make_document('<button id="user:save" aria-label=\'Say "hi"\'>Hi</button>')
        element = await document.query_selector("button")
        locator = await synthesizer.generate(element)

        assert locator.primary == "#user\\:save"
        for selector in locator.selectors():
            assert await document.query_selector(selector) == element


class TestSemanticAndStructuralTiers:
    """Test semantic and structural selectors."""

    @pytest.mark.asyncio
    async def test_placeholder_primary(self, synthesizer, make_document):
        """An input with only a placeholder gets a placeholder selector."""
        document = make_document('<input placeholder="Email">')
        locator = await synthesizer.generate(await document.query_selector("input"))

        assert locator.primary == 'input[placeholder="Email"]'
        assert locator.metadata.placeholder == "Email"
        assert locator.metadata.text == "Email"
        assert locator.metadata.role == "textbox"

    @pytest.mark.asyncio
    async def test_image_alt(self, synthesizer, make_document):
        """Images get an alt selector and alt text as metadata text."""
        document = make_document('<img src="logo.png" alt="Logo">')
        locator = await synthesizer.generate(await document.query_selector("img"))

        assert locator.primary == 'img[alt="Logo"]'
        assert locator.metadata.text == "Logo"
        assert locator.metadata.role == "img"

    @pytest.mark.asyncio
    async def test_class_selector_filters_generated_classes(self, synthesizer, make_document):
        """Underscore classes are dropped and at most two classes are kept."""
        document = make_document('<button class="_x1 btn primary extra">OK</button>')
        locator = await synthesizer.generate(await document.query_selector("button"))

        assert locator.primary == "button.btn.primary"

    @pytest.mark.asyncio
    async def test_structural_path_nth_of_type(self, synthesizer, make_document):
        """Ambiguous siblings get an nth-of-type qualifier."""
        document = make_document("<div><span>a</span><span>b</span></div>")
        second = (await document.query_selector_all("span"))[1]
        locator = await synthesizer.generate(second)

        assert locator.primary == "html > body > div > span:nth-of-type(2)"
        assert await document.query_selector(locator.primary) == second

    @pytest.mark.asyncio
    async def test_structural_path_stops_at_stable_id(self, synthesizer, make_document):
        """The path is anchored at the nearest ancestor with a stable id."""
        document = make_document('<div id="main"><p>one</p><p>two</p></div>')
        second = (await document.query_selector_all("p"))[1]

        path = await synthesizer.structural_path(second)

        assert path == "div#main > p:nth-of-type(2)"

    @pytest.mark.asyncio
    async def test_structural_path_depth_cap(self, synthesizer, make_document):
        """The path never exceeds five levels."""
        document = make_document("<div><div><div><div><div><div><b>deep</b></div></div></div></div></div></div>")
        path = await synthesizer.structural_path(await document.query_selector("b"))

        assert len(path.split(" > ")) == 5
        assert path.endswith("b")

    @pytest.mark.asyncio
    async def test_always_has_primary(self, synthesizer, make_document):
        """An element with nothing distinctive still gets a primary."""
        document = make_document("<section></section>")
        locator = await synthesizer.generate(await document.query_selector("section"))

        assert locator.primary
        assert await document.query_selector(locator.primary) is not None


class TestMetadata:
    """Test captured metadata."""

    @pytest.mark.asyncio
    async def test_text_is_direct_only(self, synthesizer, make_document):
        """Nested element text is not captured."""
        document = make_document("<button>  Buy now  <span>(2 items)</span></button>")
        locator = await synthesizer.generate(await document.query_selector("button"))
        assert locator.metadata.text == "Buy now"

    @pytest.mark.asyncio
    async def test_text_capped(self, synthesizer, make_document):
        """Captured text is at most 50 characters."""
        document = make_document(f"<p>{'word ' * 30}</p>")
        locator = await synthesizer.generate(await document.query_selector("p"))
        assert len(locator.metadata.text) <= 50

    @pytest.mark.asyncio
    async def test_blank_text_omitted(self, synthesizer, make_document):
        """Whitespace-only text is not recorded."""
        document = make_document("<div>   </div>")
        locator = await synthesizer.generate(await document.query_selector("div"))
        assert locator.metadata.text is None

    @pytest.mark.asyncio
    async def test_password_value_never_captured(self, make_document):
        """Password values do not leak into metadata text."""
        document = make_document('<input type="password" value="hunter2">')
        text = await visible_text(await document.query_selector("input"))
        assert text == ""

    @pytest.mark.asyncio
    async def test_generation_is_deterministic(self, synthesizer, make_document):
        """Generating twice for an unchanged element gives the same locator."""
        document = make_document('<form><input name="q" class="search"></form>')
        element = await document.query_selector("input")

        first = await synthesizer.generate(element)
        second = await synthesizer.generate(element)

        assert first == second

    @pytest.mark.asyncio
    async def test_backend_errors_tolerated(self, synthesizer):
        """A backend that fails every read still yields a locator."""
        element = MagicMock()
        element.attributes = AsyncMock(side_effect=DomError("detached"))
        element.tag_name = AsyncMock(return_value="div")
        element.class_list = AsyncMock(side_effect=DomError("detached"))

        locator = await synthesizer.generate(element)

        assert locator.primary == "div"
        assert locator.metadata is None


class TestShortcuts:
    """Test module-level helpers."""

    @pytest.mark.asyncio
    async def test_generate_locator_and_selector(self, make_document):
        """Shortcuts agree with the synthesizer."""
        document = make_document('<button data-testid="go">Go</button>')
        element = await document.query_selector("button")

        locator = await generate_locator(element)

        assert locator.primary == '[data-testid="go"]'
        assert await generate_selector(element) == locator.primary

    @pytest.mark.asyncio
    async def test_simple_selector_with_id(self, make_document):
        """An id is used as is."""
        document = make_document('<div id="x1">a</div>')
        assert await simple_selector(await document.query_selector("div")) == "#x1"

    @pytest.mark.asyncio
    async def test_simple_selector_path(self, make_document):
        """Without an id a positional path is built."""
        document = make_document('<ul><li class="item">a</li><li class="item">b</li></ul>')
        second = (await document.query_selector_all("li"))[1]

        selector = await simple_selector(second)

        assert selector.endswith("li.item:nth-of-type(2)")
        assert await document.query_selector(selector) == second
