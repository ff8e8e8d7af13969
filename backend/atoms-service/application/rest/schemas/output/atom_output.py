"""Atom output schemas for API responses.

This module contains Pydantic models for atom-related API responses,
including single atoms, the add-atom envelope and the paginated gallery.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from domain.entities.atom import Atom
from domain.entities.filters import PaginationMetadata
from pydantic import BaseModel


class AtomResponse(BaseModel):
    """Schema for atom data in API responses.

    Example:
        >>> atom_response = AtomResponse(id=1, title="Sunset", content_type="image", tags=["sky"])
    """

    id: int
    title: str
    content_type: str
    description: Optional[str] = None
    link: Optional[str] = None
    media_source_link: Optional[str] = None
    creator_name: Optional[str] = None
    tags: List[str] = []
    metadata: Optional[Dict[str, Any]] = None
    flag_for_deletion: bool = False
    hidden: bool = False
    store_in_database: Optional[bool] = None
    image_path: Optional[str] = None
    thumbnail_path: Optional[str] = None
    is_external: Optional[bool] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None
    location_address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, atom: Atom) -> AtomResponse:
        """Convert a domain Atom to its API response."""
        return cls(**atom.__dict__)


class AddAtomResponse(BaseModel):
    """Envelope returned when an atom is added.

    Attributes:
        success (bool): Always True on a 201 response.
        atom (AtomResponse): The stored atom.
    """

    success: bool = True
    atom: AtomResponse


class PaginationInfo(BaseModel):
    """Schema for pagination metadata in API responses.

    Attributes:
        current_page (int): Current page number (1-indexed).
        total_pages (int): Total number of pages available.
        total_atoms (int): Total number of atoms across all pages.
        atoms_per_page (int): Number of atoms per page.
        has_next (bool): Whether there is a next page available.
        has_previous (bool): Whether there is a previous page available.

    Example:
        >>> pagination = PaginationInfo(
        ...     current_page=2,
        ...     total_pages=5,
        ...     total_atoms=47,
        ...     atoms_per_page=10,
        ...     has_next=True,
        ...     has_previous=True
        ... )
    """

    current_page: int
    total_pages: int
    total_atoms: int
    atoms_per_page: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_entity(cls, pagination_metadata: PaginationMetadata) -> PaginationInfo:
        """Convert domain PaginationMetadata to API response PaginationInfo.

        Args:
            pagination_metadata: Domain pagination metadata entity.

        Returns:
            PaginationInfo: Corresponding API response model.
        """
        return cls(
            current_page=pagination_metadata.current_page,
            total_pages=pagination_metadata.total_pages,
            total_atoms=pagination_metadata.total_atoms,
            atoms_per_page=pagination_metadata.atoms_per_page,
            has_next=pagination_metadata.has_next,
            has_previous=pagination_metadata.has_previous,
        )


class GalleryResponse(BaseModel):
    """Response model for the gallery endpoint.

    Attributes:
        atoms: Atoms of the requested page.
        pagination: Pagination information for the filtered result.
    """

    atoms: List[AtomResponse]
    pagination: PaginationInfo


class ChildAtomsResponse(BaseModel):
    """Child atom ids of an idea."""

    parent_atom_id: int
    child_atom_ids: List[int]
