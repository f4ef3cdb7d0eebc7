"""Utility functions for page selection and filtering."""

import re
from typing import List, Optional

from ..errors import EmptyPageRange, InvalidPage, InvalidRange, NoPagesSelected

_DIGITS = re.compile(r"[0-9]+")


def _parse_page_number(text: str) -> Optional[int]:
    """Parse a base-10 page number, returning None when it is not one."""
    text = text.strip()
    if not _DIGITS.fullmatch(text):
        return None
    return int(text)


def resolve_page_range(page_range: str, total_pages: int) -> List[int]:
    """
    Resolve a page range expression into zero-based page indices.

    Args:
        page_range: Page range string (e.g., "1-3, 5, 8-10").
                    Pages are 1-indexed; ranges are inclusive.
        total_pages: Number of pages in the document.

    Returns:
        Sorted, deduplicated list of page indices (0-indexed)

    Raises:
        EmptyPageRange: The expression is blank
        InvalidRange: A "start-end" token is malformed, reversed or out of bounds
        InvalidPage: A single page token is malformed or out of bounds
        NoPagesSelected: Nothing was selected
    """
    if not page_range or not page_range.strip():
        raise EmptyPageRange()

    indices = set()

    for part in page_range.split(','):
        part = part.strip()
        if '-' in part:
            start_text, end_text = part.split('-', 1)
            start = _parse_page_number(start_text)
            end = _parse_page_number(end_text)
            if start is None or end is None or start < 1 or end > total_pages or start > end:
                raise InvalidRange(part, total_pages)
            indices.update(range(start - 1, end))
        else:
            page = _parse_page_number(part)
            if page is None or page < 1 or page > total_pages:
                raise InvalidPage(part, total_pages)
            indices.add(page - 1)

    if not indices:
        raise NoPagesSelected()

    return sorted(indices)


def full_range(total_pages: int) -> str:
    """Expression selecting every page of a document, e.g. "1-12"."""
    return f"1-{total_pages}"
