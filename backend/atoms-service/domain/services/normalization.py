"""Normalization helpers for tag and creator names.

Tag identity is defined by the normalized name, so every path that stores or
compares a tag name goes through ``normalize_tag_name``.
"""

import re
from typing import Iterable, List, Optional

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_tag_name(name: str) -> str:
    """Turn a free-text tag name into its canonical form.

    Trims, lower-cases and collapses runs of whitespace to a single space.

    Args:
        name (str): Raw tag name as typed by the user.

    Returns:
        str: Canonical tag name.

    Example:
        >>> normalize_tag_name("  Cat   Tag ")
        'cat tag'
    """
    return _WHITESPACE_RUN.sub(" ", name.strip().lower())


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Normalize a tag list, dropping empty names and duplicates.

    The first occurrence of each normalized name keeps its position.

    Args:
        tags (Optional[Iterable[str]]): Raw tag names, may be None.

    Returns:
        List[str]: Ordered list of unique canonical tag names.
    """
    normalized: List[str] = []
    for tag in tags or []:
        name = normalize_tag_name(tag)
        if name and name not in normalized:
            normalized.append(name)
    return normalized


def split_creator_names(creator_name: Optional[str]) -> List[str]:
    """Split a legacy comma-joined creator string into trimmed names."""
    if not creator_name:
        return []
    return [part.strip() for part in creator_name.split(",") if part.strip()]
