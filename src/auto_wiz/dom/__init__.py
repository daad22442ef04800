"""
DOM module - In-memory document implementation.
"""

from auto_wiz.dom.soup_document import SoupDocument, SoupElement, parse_inline_style

__all__ = [
    "SoupDocument",
    "SoupElement",
    "parse_inline_style",
]
