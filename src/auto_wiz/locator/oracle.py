"""
Visibility / Interactability Oracle.

The two predicates here are the only visibility and actionability gates used
by resolution and waiting. They look at computed style and disabled state
only: there is no bounding-box check, so a zero-size element that is styled
visible counts as visible.
"""

import logging
from typing import Optional

from auto_wiz.exceptions import DomError
from auto_wiz.interfaces.dom import FORM_CONTROL_TAGS, ElementState, IDomElement

logger = logging.getLogger(__name__)

ROOT_TAGS = frozenset({"html", "body"})


def _is_zero(opacity: str) -> bool:
    try:
        return float(opacity) == 0.0
    except (TypeError, ValueError):
        return False


def is_visible(state: ElementState) -> bool:
    """
    True unless the element is styled out of view.

    ``html`` and ``body`` are always visible.
    """
    if state.tag_name in ROOT_TAGS:
        return True
    if state.display == "none":
        return False
    if state.visibility == "hidden":
        return False
    if _is_zero(state.opacity):
        return False
    return True


def is_interactable(state: ElementState) -> bool:
    """Visible, not a disabled native control, and not ``pointer-events: none``."""
    if not is_visible(state):
        return False
    if state.tag_name in FORM_CONTROL_TAGS and state.disabled:
        return False
    if state.pointer_events == "none":
        return False
    return True


async def snapshot(element: IDomElement) -> Optional[ElementState]:
    """Element state, or None if the backend could not produce it."""
    try:
        return await element.state()
    except DomError as e:
        logger.debug(f"Could not read element state: {e}")
        return None


async def element_is_visible(element: IDomElement) -> bool:
    state = await snapshot(element)
    return state is not None and is_visible(state)


async def element_is_interactable(element: IDomElement) -> bool:
    state = await snapshot(element)
    return state is not None and is_interactable(state)
