"""Tag output schemas for API responses.

This module contains Pydantic models for tag-related API responses.
"""

from typing import List, Optional

from domain.entities.tag import Tag
from pydantic import BaseModel


class TagResponse(BaseModel):
    """Schema for tag data in API responses.

    Attributes:
        id (int): Identifier of the tag.
        name (str): The normalized name of the tag.
        count (int): Usage count.
        is_private (bool): Whether the tag is private.
        category_id (int, optional): Legacy single-parent category.

    Example:
        >>> tag_response = TagResponse(id=3, name="street art", count=12)
    """

    id: int
    name: str
    count: int = 0
    is_private: bool = False
    category_id: Optional[int] = None

    @classmethod
    def from_entity(cls, tag: Tag) -> "TagResponse":
        """Create TagResponse from a Tag entity.

        Raises:
            ValueError: If the tag has not been persisted yet.
        """
        if tag.is_new():
            raise ValueError("Cannot convert new tag entity to response (no ID)")
        return cls(
            id=tag.id,
            name=tag.name,
            count=tag.count,
            is_private=tag.is_private,
            category_id=tag.category_id,
        )


class TagListResponse(BaseModel):
    """Envelope for the tag listing, ``{"tags": [...]}``."""

    tags: List[TagResponse]


class TagMergeResponse(BaseModel):
    """Result of a tag merge.

    Attributes:
        rewritten_atom_ids (List[int]): Atoms whose tag list was rewritten.
    """

    rewritten_atom_ids: List[int]
