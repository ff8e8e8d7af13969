"""Atom input schemas for API requests.

This module contains Pydantic models for atom-related API requests,
including atom creation, partial updates and gallery queries.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator


class AtomCreate(BaseModel):
    """Schema for adding a new atom.

    Attributes:
        title (str, optional): Title of the atom. Defaults to "Untitled".
        description (str, optional): Description of the atom.
        media_source_link (str): Link to the media itself. Required.
        link (str, optional): External link.
        content_type (str): Content type. Defaults to "image".
        tags (List[str]): Tag names; normalized by the store.
        creator_name (str, optional): Comma-joined creator names.

    Example:
        >>> atom_data = AtomCreate(
        ...     title="Sunset",
        ...     media_source_link="https://img.example.com/sunset.jpg",
        ...     tags=["Sky", "Orange"],
        ...     creator_name="Ann Lee, Bo Chen"
        ... )
    """

    title: Optional[str] = None
    description: Optional[str] = None
    media_source_link: str = Field(..., description="Link to the media itself")
    link: Optional[str] = None
    content_type: str = "image"
    tags: List[str] = []
    creator_name: Optional[str] = None

    @validator("media_source_link")
    def validate_media_source_link(cls, v):
        """Reject an empty media link."""
        if not v or not v.strip():
            raise ValueError("media_source_link is required")
        return v.strip()


class AtomUpdate(BaseModel):
    """Schema for a partial atom update.

    Only the fields present in the request body are written.

    Example:
        >>> update_data = AtomUpdate(tags=["sky"], flag_for_deletion=True)
    """

    title: Optional[str] = None
    content_type: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    media_source_link: Optional[str] = None
    creator_name: Optional[str] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    flag_for_deletion: Optional[bool] = None
    hidden: Optional[bool] = None
    store_in_database: Optional[bool] = None
    image_path: Optional[str] = None
    thumbnail_path: Optional[str] = None
    is_external: Optional[bool] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    location_address: Optional[str] = None

    def to_partial(self) -> Dict[str, Any]:
        """Return only the fields the client sent."""
        return self.model_dump(exclude_unset=True)


class GalleryQuery(BaseModel):
    """Query parameters of the gallery endpoint.

    Attributes:
        q: Free-text search over title, description and tags.
        tags: Comma-separated tag names, pseudo-tags allowed.
        content_types: Comma-separated content types.
        creators: Comma-separated creator names.
        favorites: Only atoms by favorite creators.
        idea_id: Restrict to the children of this idea.
        page: Page number for pagination (1-based).
        limit: Number of atoms per page.
    """

    q: Optional[str] = Field(default="", description="Free-text search")
    tags: Optional[str] = Field(default=None, description="Comma-separated tag names")
    content_types: Optional[str] = Field(
        default=None, description="Comma-separated content types"
    )
    creators: Optional[str] = Field(
        default=None, description="Comma-separated creator names"
    )
    favorites: bool = Field(default=False, description="Only favorite creators")
    idea_id: Optional[int] = Field(default=None, description="Idea scope")
    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    limit: int = Field(default=30, ge=1, le=200, description="Atoms per page")

    @validator("q")
    def validate_query(cls, v):
        if v is None:
            return ""
        return v.strip()

    @staticmethod
    def _split(value: Optional[str]) -> List[str]:
        if not value:
            return []
        return [item.strip() for item in value.split(",") if item.strip()]

    def tag_names(self) -> List[str]:
        return self._split(self.tags)

    def content_type_list(self) -> List[str]:
        return self._split(self.content_types)

    def creator_list(self) -> List[str]:
        return self._split(self.creators)
