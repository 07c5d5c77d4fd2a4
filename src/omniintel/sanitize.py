"""Turn display strings into filesystem-safe path segments."""

from __future__ import annotations

import re

RESERVED_CHARS = '\\/:*?"<>|'
PLACEHOLDER = "_"
DEFAULT_FALLBACK = "untitled"

# Reserved characters plus C0 control characters
_RESERVED_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _clean(text: str) -> str:
    cleaned = _RESERVED_RE.sub(PLACEHOLDER, text.strip()).strip()
    # "." and ".." would point at the current or parent directory
    if cleaned.strip("."):
        return cleaned
    return ""


def sanitize_name(value: object, fallback: str = DEFAULT_FALLBACK) -> str:
    """Replace reserved and control characters with an underscore and trim whitespace.

    Never raises. When nothing usable is left (blank or dots only), the
    sanitized fallback is returned, and ``"untitled"`` if that is unusable too.
    """
    text = "" if value is None else str(value)
    return _clean(text) or _clean(fallback or "") or DEFAULT_FALLBACK
