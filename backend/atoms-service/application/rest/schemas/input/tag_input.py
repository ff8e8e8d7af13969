"""Tag input schemas for API requests.

This module contains Pydantic models for tag-related API requests,
including tag creation, update and merge operations.
"""

from typing import Optional

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    """Schema for creating a new tag.

    Attributes:
        name (str): The name of the tag to create. Normalized by the store.
        is_private (bool): Whether the tag is private.
        category_id (int, optional): Legacy single-parent category.

    Example:
        >>> tag_data = TagCreate(name="Street  Art")
        >>> print(tag_data.name)
        "Street  Art"
    """

    name: str = Field(..., min_length=1, description="Tag name")
    is_private: bool = False
    category_id: Optional[int] = None


class TagUpdate(BaseModel):
    """Schema for updating an existing tag.

    Attributes:
        name (str, optional): The new name for the tag.
        is_private (bool, optional): New private flag.

    Example:
        >>> tag_update = TagUpdate(name="important")
    """

    name: Optional[str] = Field(default=None, min_length=1, description="New tag name")
    is_private: Optional[bool] = None


class MergeRequest(BaseModel):
    """Schema for merging a duplicate entity into a surviving one.

    Used by the tag, category and creator merge endpoints.

    Attributes:
        source_id (int): Entity to remove.
        target_id (int): Surviving entity.

    Example:
        >>> merge = MergeRequest(source_id=4, target_id=9)
    """

    source_id: int
    target_id: int
