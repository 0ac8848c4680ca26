"""Shared utilities used across the booking engine."""

import re
import uuid
from typing import Optional


def generate_ref(prefix: str) -> str:
    """Build a short, human-readable reference such as ``BK-3F9A1C``."""
    return f"{prefix}-{uuid.uuid4().hex[:6].upper()}"


def normalize_search(value: str) -> str:
    """Normalize free text for case-insensitive substring matching.

    Examples:
        >>> normalize_search("  Golden   Retriever ")
        'golden retriever'
    """
    return re.sub(r"\s+", " ", value.strip()).casefold()


def matches_any(needle: str, *haystacks: Optional[str]) -> bool:
    """True if the normalized needle occurs in any non-empty haystack."""
    return any(needle in normalize_search(h) for h in haystacks if h)
