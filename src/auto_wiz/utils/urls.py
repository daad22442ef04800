"""
URL helpers used by the flow runner to decide whether a step's recorded page
is the page currently open.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def normalize_url(url: str) -> str:
    """
    Normalize a URL for comparison.

    Drops the fragment, strips a trailing slash from non-root paths and sorts
    query parameters. Unparseable input is returned unchanged.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    path = parts.path or "/"
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, query, ""))


def is_same_url(first: str, second: str) -> bool:
    """True if both URLs normalize to the same string."""
    return normalize_url(first) == normalize_url(second)


def same_page(first: str, second: str) -> bool:
    """
    True if both URLs share origin and path.

    Query and fragment are ignored; this is the check used before replaying a
    step recorded on a different page.
    """
    try:
        a, b = urlsplit(first), urlsplit(second)
    except ValueError:
        return first == second
    if not a.netloc or not b.netloc:
        return first == second

    def _path(path: str) -> str:
        return path.rstrip("/") or "/"

    return (
        a.scheme.lower() == b.scheme.lower()
        and a.netloc.lower() == b.netloc.lower()
        and _path(a.path) == _path(b.path)
    )


def is_valid_url(url: str) -> bool:
    """True for absolute URLs with a scheme and a host (or file: URLs)."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme == "file":
        return bool(parts.path)
    return bool(parts.scheme) and bool(parts.netloc)

