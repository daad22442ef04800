"""
CSS selector string helpers.
"""

from typing import Optional


def css_escape(value: str) -> str:
    """
    Escape an identifier for use in a CSS selector (``CSS.escape`` semantics).

    Example:
        >>> css_escape("1st")
        '\\\\31 st'
        >>> css_escape("a:b")
        'a\\\\:b'
    """
    length = len(value)
    out = []
    for index, char in enumerate(value):
        code = ord(char)
        if code == 0:
            out.append("\ufffd")
        elif 0x01 <= code <= 0x1F or code == 0x7F:
            out.append(f"\\{code:x} ")
        elif index == 0 and char.isdigit() and char.isascii():
            out.append(f"\\{code:x} ")
        elif index == 1 and char.isdigit() and char.isascii() and value[0] == "-":
            out.append(f"\\{code:x} ")
        elif index == 0 and char == "-" and length == 1:
            out.append("\\-")
        elif code >= 0x80 or char in "-_" or (char.isascii() and char.isalnum()):
            out.append(char)
        else:
            out.append("\\" + char)
    return "".join(out)


def quote_attribute_value(value: str) -> str:
    """Double-quote a value for an attribute selector, escaping as needed."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\a ")
        .replace("\r", "\\d ")
    )
    return f'"{escaped}"'


def attribute_selector(name: str, value: str, tag: Optional[str] = None, operator: str = "=") -> str:
    """
    Build ``tag[name="value"]``.

    Example:
        >>> attribute_selector("placeholder", "Email", tag="input")
        'input[placeholder="Email"]'
    """
    return f"{tag or ''}[{name}{operator}{quote_attribute_value(value)}]"
