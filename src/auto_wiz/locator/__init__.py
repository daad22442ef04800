"""
Locator module - Generate, resolve and wait for element locators.

Example:
    >>> from auto_wiz.locator import SelectorSynthesizer, LocatorResolver, WaitEngine
    >>> locator = await SelectorSynthesizer().generate(element)
    >>> element = await WaitEngine(LocatorResolver(document)).wait_for_locator(locator)
"""

from auto_wiz.locator.css import attribute_selector, css_escape, quote_attribute_value
from auto_wiz.locator.models import ElementLocator, LocatorMetadata
from auto_wiz.locator.oracle import (
    element_is_interactable,
    element_is_visible,
    is_interactable,
    is_visible,
)
from auto_wiz.locator.queries import (
    accessible_name,
    find_by_label_text,
    find_by_placeholder,
    find_by_role,
    find_by_test_id,
    find_by_text,
    role_of,
)
from auto_wiz.locator.resolver import LocatorResolver, ResolvedElement
from auto_wiz.locator.synthesizer import (
    SelectorSynthesizer,
    generate_locator,
    generate_selector,
    simple_selector,
)
from auto_wiz.locator.wait import WaitEngine

__all__ = [
    # Models
    "ElementLocator",
    "LocatorMetadata",
    # Synthesis
    "SelectorSynthesizer",
    "generate_locator",
    "generate_selector",
    "simple_selector",
    # Oracle
    "is_visible",
    "is_interactable",
    "element_is_visible",
    "element_is_interactable",
    # Resolution
    "LocatorResolver",
    "ResolvedElement",
    "WaitEngine",
    # Queries
    "find_by_text",
    "find_by_role",
    "find_by_label_text",
    "find_by_placeholder",
    "find_by_test_id",
    "accessible_name",
    "role_of",
    # CSS helpers
    "css_escape",
    "quote_attribute_value",
    "attribute_selector",
]
