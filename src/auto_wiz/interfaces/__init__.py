"""
Interfaces module - Abstract base classes for pluggable components.

This module defines the contracts that document backends (in-memory DOM,
Playwright) must implement to be driven by the replay engine.
"""

from auto_wiz.interfaces.dom import (
    IDocument,
    IDomElement,
    INavigator,
    ElementKind,
    ElementState,
    DomEvent,
    FORM_CONTROL_TAGS,
    classify_element,
)

__all__ = [
    "IDocument",
    "IDomElement",
    "INavigator",
    "ElementKind",
    "ElementState",
    "DomEvent",
    "FORM_CONTROL_TAGS",
    "classify_element",
]
