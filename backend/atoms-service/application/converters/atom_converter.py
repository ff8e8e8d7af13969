"""Atom converters for transforming between Pydantic schemas and domain objects.

This module contains converter functions for transforming atom objects
between the API layer (Pydantic) and the domain layer (entities and
store payloads).
"""

from typing import Any, Dict, List, Sequence

from domain.entities.atom import IDEA_CONTENT_TYPE, Atom
from domain.entities.filters import FilterCriteria, PaginationMetadata
from domain.services.normalization import normalize_tag_name, normalize_tags

from application.rest.schemas.input.atom_input import AtomCreate, GalleryQuery
from application.rest.schemas.output.atom_output import (
    AtomResponse,
    GalleryResponse,
    PaginationInfo,
)

DEFAULT_TITLE = "Untitled"


class AtomConverter:
    """Converter class for atom transformations between layers.

    Example:
        >>> payload = AtomConverter.create_input_to_payload(AtomCreate(media_source_link="https://x/y.png"))
        >>> payload["title"]
        'Untitled'
    """

    @staticmethod
    def create_input_to_payload(atom_create: AtomCreate) -> Dict[str, Any]:
        """Convert AtomCreate into the field mapping the store inserts.

        Tags are normalized and ideas are tagged with their own normalized
        title, so the children of an idea can be found by that tag.

        Args:
            atom_create (AtomCreate): Pydantic schema of the request body.

        Returns:
            Dict[str, Any]: Atom fields for ``CollectionStore.add_atom_with_creators``.
        """
        tags = normalize_tags(atom_create.tags)
        if atom_create.content_type == IDEA_CONTENT_TYPE and atom_create.title:
            idea_tag = normalize_tag_name(atom_create.title)
            if idea_tag and idea_tag not in tags:
                tags.append(idea_tag)

        return {
            "title": atom_create.title or DEFAULT_TITLE,
            "description": atom_create.description or None,
            "media_source_link": atom_create.media_source_link,
            "link": atom_create.link or None,
            "content_type": atom_create.content_type,
            "tags": tags,
            "creator_name": atom_create.creator_name or None,
            "store_in_database": True,
        }

    @staticmethod
    def query_to_criteria(query: GalleryQuery) -> FilterCriteria:
        """Convert gallery query parameters into filter criteria."""
        return FilterCriteria(
            search_term=query.q or "",
            content_types=frozenset(query.content_type_list()),
            creators=frozenset(query.creator_list()),
            selected_tags=frozenset(query.tag_names()),
            show_only_favorites=query.favorites,
            idea_id=query.idea_id,
        )

    @staticmethod
    def entities_to_responses(atoms: Sequence[Atom]) -> List[AtomResponse]:
        return [AtomResponse.from_entity(atom) for atom in atoms]

    @staticmethod
    def page_to_response(
        visible: Sequence[Atom], query: GalleryQuery
    ) -> GalleryResponse:
        """Cut one page out of the filtered atoms.

        Args:
            visible (Sequence[Atom]): Filtered atoms in display order.
            query (GalleryQuery): Query carrying ``page`` and ``limit``.

        Returns:
            GalleryResponse: Atoms of the page with pagination metadata.
        """
        pagination = PaginationMetadata.calculate(query.page, len(visible), query.limit)
        page = visible[pagination.offset : pagination.offset + query.limit]
        return GalleryResponse(
            atoms=AtomConverter.entities_to_responses(page),
            pagination=PaginationInfo.from_entity(pagination),
        )
