"""Tag domain entity.

This module contains the Tag domain entity that represents
a canonical label attachable to atoms, creators and categories.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from domain.entities.rows import known_columns, parse_timestamp
from domain.services.normalization import normalize_tag_name

FLAGGED_PSEUDO_TAG = "flagged"
NO_TAG_PSEUDO_TAG = "no-tag"
PSEUDO_TAGS = frozenset({FLAGGED_PSEUDO_TAG, NO_TAG_PSEUDO_TAG})


@dataclass(frozen=True)
class Tag:
    """Domain entity representing a tag.

    This is an immutable domain object identified by its normalized name.

    Attributes:
        id (Optional[int]): Unique identifier for the tag. None for new tags.
        name (str): Canonical (normalized) name of the tag.
        count (int): Usage count maintained by the remote store.
        is_private (bool): Whether the tag itself is marked private.
        category_id (Optional[int]): Legacy single-parent category, superseded
            by the category_tags join table.
        created_at (Optional[datetime]): Creation timestamp.

    Example:
        >>> tag = Tag(id=None, name="  Street   Art ")
        >>> print(tag.name)
        "street art"

    Business Rules:
        - Tag name must be non-empty after normalization
        - Tag names are unique after normalization (enforced by the collection store)
    """

    id: Optional[int]
    name: str
    count: int = 0
    is_private: bool = False
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate and normalize the tag after initialization.

        Raises:
            ValueError: If tag name is empty or contains only whitespace.
        """
        if not self.name or not self.name.strip():
            raise ValueError("Tag name cannot be empty or whitespace")

        object.__setattr__(self, "name", normalize_tag_name(self.name))
        if self.count is None:
            object.__setattr__(self, "count", 0)
        if self.is_private is None:
            object.__setattr__(self, "is_private", False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Tag":
        """Build a Tag from a remote store row, normalizing its name."""
        values = known_columns(cls, row)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        return cls(**values)

    def is_new(self) -> bool:
        """Check if this is a new tag (not yet persisted).

        Returns:
            bool: True if the tag has no ID (new), False otherwise.
        """
        return self.id is None


def is_pseudo_tag(name: str) -> bool:
    """Check if a (normalized) name is one of the filter pseudo-tags."""
    return name in PSEUDO_TAGS
