"""
Slug and id generation.

"John Doe" -> "john-doe", "API Reference" -> "api-reference".
"""

import re
import time
from collections.abc import Callable

MAX_NUMBERED_SUFFIX = 100


def slugify(name: str) -> str:
    """Convert a name to a filesystem-safe slug (ASCII word characters only)."""
    slug = name.lower().strip()
    # Drop anything that is not a word character, whitespace or hyphen
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    # Spaces and underscores become hyphens
    slug = re.sub(r"[\s_]+", "-", slug, flags=re.ASCII)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def generate_unique_id(base_name: str, exists: Callable[[str], bool]) -> str:
    """
    Slugify ``base_name`` and make it unique.

    Tries the bare slug, then ``-2`` through ``-100``, then falls back to a
    millisecond timestamp suffix.
    """
    base_id = slugify(base_name)
    if not exists(base_id):
        return base_id

    for suffix in range(2, MAX_NUMBERED_SUFFIX + 1):
        candidate = f"{base_id}-{suffix}"
        if not exists(candidate):
            return candidate

    return f"{base_id}-{int(time.time() * 1000)}"
