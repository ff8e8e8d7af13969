"""Filter domain entities for the atom gallery.

This module contains the domain entities describing which atoms the gallery
shows: the predicate set, its serialized signature, and the pagination
objects layered on top of the filtered result.
"""

import json
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from domain.entities.tag import PSEUDO_TAGS
from domain.services.normalization import normalize_tag_name


@dataclass(frozen=True)
class FilterCriteria:
    """Domain entity representing the gallery predicate set.

    Attributes:
        search_term: Free-text search (title, description, tags).
        content_types: Selected content types; empty matches all.
        creators: Selected creator names; empty matches all.
        selected_tags: Selected tag names, pseudo-tags included.
        show_only_favorites: Restrict to atoms by favorite creators.
        idea_id: Active idea scope, if any.
    """

    search_term: str = ""
    content_types: FrozenSet[str] = frozenset()
    creators: FrozenSet[str] = frozenset()
    selected_tags: FrozenSet[str] = frozenset()
    show_only_favorites: bool = False
    idea_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "search_term", (self.search_term or "").strip())
        object.__setattr__(self, "content_types", frozenset(self.content_types))
        object.__setattr__(
            self, "creators", frozenset(c.strip() for c in self.creators if c.strip())
        )
        object.__setattr__(
            self,
            "selected_tags",
            frozenset(
                normalize_tag_name(t) for t in self.selected_tags if t and t.strip()
            ),
        )

    @property
    def real_tags(self) -> FrozenSet[str]:
        """Selected tags minus the pseudo-tags."""
        return self.selected_tags - PSEUDO_TAGS

    def has_tag_selection(self) -> bool:
        return len(self.selected_tags) > 0

    def signature(self) -> str:
        """Serialize the predicate set deterministically.

        Two criteria with the same predicates produce the same signature
        regardless of the order in which sets were built.
        """
        return json.dumps(
            {
                "search_term": self.search_term.lower(),
                "content_types": sorted(self.content_types),
                "creators": sorted(self.creators),
                "selected_tags": sorted(self.selected_tags),
                "show_only_favorites": self.show_only_favorites,
                "idea_id": self.idea_id,
            },
            sort_keys=True,
        )


@dataclass
class RevealWindow:
    """Lazy-reveal pagination over a filtered, ordered result.

    The reveal count only grows, except when the filter signature changes,
    which resets it to the initial page size.

    Attributes:
        initial_size: Number of atoms revealed for a fresh filter.
        increment: Number of atoms added by each ``reveal_more`` call.
        visible_count: Current reveal count.
        signature: Filter signature the count belongs to.
    """

    initial_size: int = 30
    increment: int = 30
    visible_count: int = field(init=False)
    signature: Optional[str] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.initial_size < 1 or self.increment < 1:
            raise ValueError("Page sizes must be at least 1")
        self.visible_count = self.initial_size

    def sync(self, signature: str) -> bool:
        """Track the current filter signature.

        Returns:
            bool: True if the signature changed and the window was reset.
        """
        if signature == self.signature:
            return False
        self.signature = signature
        self.visible_count = self.initial_size
        return True

    def reveal_more(self, total: Optional[int] = None) -> int:
        """Reveal the next increment; never exceeds ``total`` when given."""
        grown = self.visible_count + self.increment
        if total is not None:
            grown = max(self.visible_count, min(grown, total))
        self.visible_count = grown
        return self.visible_count

    def slice(self, items: list) -> list:
        return items[: self.visible_count]

    def has_more(self, total: int) -> bool:
        return self.visible_count < total


@dataclass
class PaginationMetadata:
    """Domain entity representing page-based pagination information.

    Used by the HTTP gallery endpoint, which is stateless and therefore
    pages instead of revealing.

    Attributes:
        current_page: Current page number
        total_pages: Total number of pages
        total_atoms: Total number of atoms matching the filters
        atoms_per_page: Number of atoms per page
        has_next: Whether there is a next page
        has_previous: Whether there is a previous page
    """

    current_page: int
    total_pages: int
    total_atoms: int
    atoms_per_page: int
    has_next: bool
    has_previous: bool

    @classmethod
    def calculate(
        cls, current_page: int, total_atoms: int, atoms_per_page: int
    ) -> "PaginationMetadata":
        """Calculate pagination metadata from basic parameters.

        Args:
            current_page: The current page number (1-based)
            total_atoms: Total number of atoms found
            atoms_per_page: Number of atoms per page

        Returns:
            PaginationMetadata: Calculated pagination information
        """
        total_pages = (
            (total_atoms + atoms_per_page - 1) // atoms_per_page
            if total_atoms > 0
            else 1
        )
        return cls(
            current_page=current_page,
            total_pages=total_pages,
            total_atoms=total_atoms,
            atoms_per_page=atoms_per_page,
            has_next=current_page < total_pages,
            has_previous=current_page > 1,
        )

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.atoms_per_page
