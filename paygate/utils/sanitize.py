"""Input sanitization for user-supplied text."""
from typing import Any

import bleach


def sanitize_text(value: Any) -> Any:
    """Strip all HTML tags and surrounding whitespace; non-strings pass through."""

    if not isinstance(value, str):
        return value
    return bleach.clean(value, tags=[], strip=True).strip()


__all__ = ["sanitize_text"]
