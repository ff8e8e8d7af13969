"""Atom domain entity for the atom catalog.

This module contains the Atom entity representing a single cataloged item
(image, link, note, video, recipe, idea, ...).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from domain.entities.rows import field_names, known_columns, parse_timestamp
from domain.services.normalization import split_creator_names

IDEA_CONTENT_TYPE = "idea"

# Columns the server owns; callers never write them directly.
READ_ONLY_FIELDS = frozenset({"id", "created_at"})


@dataclass(frozen=True)
class Atom:
    """Domain entity representing a cataloged piece of media.

    Atoms are immutable snapshots. The collection store replaces the whole
    snapshot when a partial update is applied.

    Attributes:
        id (int): Server-assigned numeric identifier.
        title (str): Title of the atom.
        content_type (str): Open enum (image, video, link, idea, note, recipe, location...).
        description (Optional[str]): Rich text description.
        link (Optional[str]): External link.
        media_source_link (Optional[str]): Link to the media itself.
        creator_name (Optional[str]): Legacy comma-joined creator names.
        tags (List[str]): Ordered set of canonical tag names.
        metadata (Optional[Dict[str, Any]]): Type-specific payload.
        flag_for_deletion (bool): Marked for review/deletion by the user.
        hidden (bool): Hidden from the main gallery (idea children).
        created_at (Optional[datetime]): Creation timestamp.
        updated_at (Optional[datetime]): Last update timestamp.
    """

    id: int
    title: str
    content_type: str
    description: Optional[str] = None
    link: Optional[str] = None
    media_source_link: Optional[str] = None
    creator_name: Optional[str] = None
    tags: List[str] = field(default_factory=list)
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

    def __post_init__(self) -> None:
        # Nullable columns in the remote table collapse to their defaults.
        if self.tags is None:
            object.__setattr__(self, "tags", [])
        if self.flag_for_deletion is None:
            object.__setattr__(self, "flag_for_deletion", False)
        if self.hidden is None:
            object.__setattr__(self, "hidden", False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Atom":
        """Build an Atom from a remote store row.

        Args:
            row (Mapping[str, Any]): Row as returned by the remote store.

        Returns:
            Atom: Entity with parsed timestamps. Unknown columns are ignored.
        """
        values = known_columns(cls, row)
        values["created_at"] = parse_timestamp(values.get("created_at"))
        values["updated_at"] = parse_timestamp(values.get("updated_at"))
        values["tags"] = list(values.get("tags") or [])
        return cls(**values)

    @classmethod
    def writable_fields(cls) -> FrozenSet[str]:
        """Fields a caller may set on insert or partial update."""
        return field_names(cls) - READ_ONLY_FIELDS

    def with_updates(self, partial: Mapping[str, Any]) -> "Atom":
        """Return a copy with ``partial`` applied verbatim."""
        return replace(self, **dict(partial))

    def creator_names(self) -> List[str]:
        """Creator names parsed from the legacy comma-joined field."""
        return split_creator_names(self.creator_name)

    def matches_text_search(self, query: str) -> bool:
        """Check if the atom matches a text search query.

        The query matches case-insensitively as a substring of the title,
        the description or any tag. An empty query matches everything.

        Args:
            query (str): The search query string.

        Returns:
            bool: True if the atom matches the query, False otherwise.
        """
        if not query.strip():
            return True

        query_lower = query.lower().strip()
        if query_lower in (self.title or "").lower():
            return True
        if query_lower in (self.description or "").lower():
            return True
        return any(query_lower in tag.lower() for tag in self.tags)
