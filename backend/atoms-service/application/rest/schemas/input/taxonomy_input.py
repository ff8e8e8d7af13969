"""Category, creator and settings input schemas for API requests."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """Schema for creating a new category.

    Example:
        >>> category = CategoryCreate(name="Nature", is_private=False)
    """

    name: str = Field(..., min_length=1, description="Category name")
    description: Optional[str] = None
    is_private: bool = False


class CategoryUpdate(BaseModel):
    """Schema for updating a category. All fields are optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_private: Optional[bool] = None


class CreatorCreate(BaseModel):
    """Schema for creating a new creator.

    Example:
        >>> creator = CreatorCreate(name="Ann Lee", link_1="https://annlee.example.com")
    """

    name: str = Field(..., min_length=1, description="Creator name")
    link_1: Optional[str] = None
    link_2: Optional[str] = None
    link_3: Optional[str] = None

    def links(self) -> Dict[str, Optional[str]]:
        return {"link_1": self.link_1, "link_2": self.link_2, "link_3": self.link_3}


class CreatorUpdate(BaseModel):
    """Schema for a partial creator update."""

    name: Optional[str] = Field(default=None, min_length=1)
    link_1: Optional[str] = None
    link_2: Optional[str] = None
    link_3: Optional[str] = None

    def to_partial(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class DefaultCategoryUpdate(BaseModel):
    """Schema for setting or clearing the default category.

    Example:
        >>> DefaultCategoryUpdate(category_id=None)  # clears the default
    """

    category_id: Optional[int] = None
