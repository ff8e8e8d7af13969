"""Category, creator and settings output schemas for API responses."""

from typing import List, Optional

from domain.entities.category import Category
from domain.entities.creator import Creator
from pydantic import BaseModel


class CategoryResponse(BaseModel):
    """Schema for category data in API responses.

    Example:
        >>> CategoryResponse(id=1, name="Nature", is_private=False)
    """

    id: int
    name: str
    description: Optional[str] = None
    is_private: bool = False

    @classmethod
    def from_entity(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            is_private=category.is_private,
        )


class CreatorResponse(BaseModel):
    """Schema for creator data in API responses."""

    id: int
    name: str
    count: int = 0
    links: List[str] = []

    @classmethod
    def from_entity(cls, creator: Creator) -> "CreatorResponse":
        return cls(
            id=creator.id, name=creator.name, count=creator.count, links=creator.links
        )


class DefaultCategoryResponse(BaseModel):
    """Currently persisted default category, None when unset."""

    category_id: Optional[int] = None
