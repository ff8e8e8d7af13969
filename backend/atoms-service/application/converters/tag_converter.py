"""Taxonomy converters for transforming domain entities into Pydantic schemas.

This module contains converter functions for tags, categories and
creators between the domain layer (entities) and the API layer (Pydantic).
"""

from typing import List, Sequence

from domain.entities.category import Category
from domain.entities.creator import Creator
from domain.entities.tag import Tag

from application.rest.schemas.output.tag_output import TagListResponse, TagResponse
from application.rest.schemas.output.taxonomy_output import (
    CategoryResponse,
    CreatorResponse,
)


class TagConverter:
    """Converter class for tag transformations between layers.

    Example:
        >>> tag_response = TagConverter.entity_to_response(Tag(id=1, name="work"))
        >>> tag_response.name
        'work'
    """

    @staticmethod
    def entity_to_response(tag: Tag) -> TagResponse:
        """Convert a Tag entity to a TagResponse.

        Raises:
            ValueError: If the tag entity has no ID (not persisted).
        """
        return TagResponse.from_entity(tag)

    @staticmethod
    def entities_to_responses(tags: Sequence[Tag]) -> List[TagResponse]:
        """Convert a list of Tag entities to a list of TagResponse schemas."""
        return [TagConverter.entity_to_response(tag) for tag in tags]

    @staticmethod
    def entities_to_list_response(tags: Sequence[Tag]) -> TagListResponse:
        return TagListResponse(tags=TagConverter.entities_to_responses(tags))


class CategoryConverter:
    """Converter class for categories."""

    @staticmethod
    def entities_to_responses(categories: Sequence[Category]) -> List[CategoryResponse]:
        return [CategoryResponse.from_entity(category) for category in categories]


class CreatorConverter:
    """Converter class for creators."""

    @staticmethod
    def entities_to_responses(creators: Sequence[Creator]) -> List[CreatorResponse]:
        return [CreatorResponse.from_entity(creator) for creator in creators]
