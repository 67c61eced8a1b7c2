"""Pure functions for building MongoDB queries for summary listing."""

import re
from typing import Any

from synopsis.errors import ValidationError

SEARCH_FIELDS = ("note", "summary", "tags")

# Public sort names mapped to stored field paths
SORT_FIELDS: dict[str, str] = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "note": "note",
    "summary": "summary",
    "starred": "starred",
}

DEFAULT_SORT: list[tuple[str, int]] = [("created_at", -1), ("_id", -1)]

# Upper bounds for page and limit; keeps the skip offset inside a 64-bit integer
MAX_PAGE = 1_000_000
MAX_PAGE_SIZE = 1000


def build_search_query(q: str | None) -> dict[str, Any]:
    """Build a case-insensitive substring match over note, summary and tags.

    On an array field a `$regex` matches when any element matches, so a tag
    hit counts. The search text is escaped and matched literally.

    Args:
        q: Search text; None or blank means no filter

    Returns:
        MongoDB filter document
    """
    text = (q or "").strip()
    if not text:
        return {}

    pattern = re.escape(text)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]}


def parse_sort(sort: str | None) -> list[tuple[str, int]]:
    """Parse a single sort key with optional '-' prefix for descending.

    `_id` is appended as a tiebreaker so pagination is stable.

    Raises:
        ValidationError: If the field is not sortable
    """
    if not sort or not sort.strip():
        return list(DEFAULT_SORT)

    key = sort.strip()
    direction = 1
    if key.startswith("-"):
        key = key[1:]
        direction = -1

    field_path = SORT_FIELDS.get(key)
    if field_path is None:
        raise ValidationError(f"Cannot sort by '{key}'")

    return [(field_path, direction), ("_id", direction)]


def is_paginated(page: int, limit: int) -> bool:
    """Paginate only when both page and limit are positive, otherwise return the full list."""
    return page > 0 and limit > 0
