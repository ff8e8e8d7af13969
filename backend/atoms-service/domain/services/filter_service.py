"""Filter domain service for the atom gallery.

This module contains the pure filter over the atom collection, the context
it needs from the collection store, and the GalleryView that layers the
lazy-reveal window and idea-scope loading on top of it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional, Sequence

from domain.entities.atom import Atom
from domain.entities.filters import FilterCriteria, RevealWindow
from domain.entities.tag import FLAGGED_PSEUDO_TAG, NO_TAG_PSEUDO_TAG
from domain.services.normalization import normalize_tags, split_creator_names
from domain.services.relationship_service import build_category_tag_lookup

if TYPE_CHECKING:
    from domain.services.collection_store import CollectionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterContext:
    """Store-derived data the filter predicates depend on.

    Attributes:
        private_tag_names: Names of tags that belong to a private category.
        default_category_tag_names: Tag names of the default category, or
            None when no default category is set.
        favorite_creators: Names of the favorite creators.
        idea_child_ids: Child ids of the active idea, or None when they are
            not loaded.
    """

    private_tag_names: FrozenSet[str] = frozenset()
    default_category_tag_names: Optional[FrozenSet[str]] = None
    favorite_creators: FrozenSet[str] = frozenset()
    idea_child_ids: Optional[FrozenSet[int]] = None


def build_filter_context(
    store: "CollectionStore", idea_child_ids: Optional[Iterable[int]] = None
) -> FilterContext:
    """Derive a FilterContext from the current store snapshot.

    Args:
        store (CollectionStore): Source of categories, join rows and settings.
        idea_child_ids (Optional[Iterable[int]]): Loaded children of the active idea.

    Returns:
        FilterContext: Context for ``filter_atoms``.
    """
    lookup = build_category_tag_lookup(store.category_tags, store.tags)
    private_category_ids = {c.id for c in store.categories if c.is_private}
    private_tag_names = frozenset(
        tag.name
        for category_id, tags in lookup.items()
        if category_id in private_category_ids
        for tag in tags
    )

    default_tag_names = None
    if store.default_category_id is not None:
        default_tag_names = frozenset(
            tag.name for tag in lookup.get(store.default_category_id, [])
        )

    return FilterContext(
        private_tag_names=private_tag_names,
        default_category_tag_names=default_tag_names,
        favorite_creators=frozenset(store.favorite_creators),
        idea_child_ids=frozenset(idea_child_ids) if idea_child_ids is not None else None,
    )


def filter_signature(
    criteria: FilterCriteria, context: Optional[FilterContext] = None
) -> str:
    """Deterministic serialization of a predicate set.

    With a context, the default category scope and the favorite creators are
    part of the signature as well, since changing them changes the result.
    """
    if context is None:
        return criteria.signature()
    default_scope = context.default_category_tag_names
    return json.dumps(
        {
            "criteria": criteria.signature(),
            "default_category_tags": (
                sorted(default_scope) if default_scope is not None else None
            ),
            "favorite_creators": sorted(context.favorite_creators),
        },
        sort_keys=True,
    )


def filter_atoms(
    atoms: Sequence[Atom], criteria: FilterCriteria, context: FilterContext
) -> List[Atom]:
    """Select the atoms that satisfy every predicate of ``criteria``.

    The function is pure: it reads its arguments only and keeps the input
    order, dropping repeated ids.

    Args:
        atoms (Sequence[Atom]): Atoms in display order.
        criteria (FilterCriteria): Active predicates.
        context (FilterContext): Store-derived data for the predicates.

    Returns:
        List[Atom]: The visible atoms.

    Raises:
        ValueError: If an idea scope is active but its children are not loaded.
    """
    if criteria.idea_id is not None and context.idea_child_ids is None:
        raise ValueError(f"Children of idea {criteria.idea_id} are not loaded")

    reveal_private = bool(criteria.selected_tags & context.private_tag_names)
    scope_waived = criteria.has_tag_selection()

    seen = set()
    result: List[Atom] = []
    for atom in atoms:
        if atom.id in seen:
            continue
        if _matches(atom, criteria, context, reveal_private, scope_waived):
            seen.add(atom.id)
            result.append(atom)
    return result


def _matches(
    atom: Atom,
    criteria: FilterCriteria,
    context: FilterContext,
    reveal_private: bool,
    scope_waived: bool,
) -> bool:
    # Stored tags may predate normalization.
    tags = set(normalize_tags(atom.tags))

    if criteria.search_term and not atom.matches_text_search(criteria.search_term):
        return False

    if criteria.content_types and atom.content_type not in criteria.content_types:
        return False

    creators = set(split_creator_names(atom.creator_name))
    if criteria.creators and not creators & criteria.creators:
        return False
    if criteria.show_only_favorites and not creators & context.favorite_creators:
        return False

    if not reveal_private and tags & context.private_tag_names:
        return False

    if (
        context.default_category_tag_names is not None
        and not scope_waived
        and not tags & context.default_category_tag_names
    ):
        return False

    if FLAGGED_PSEUDO_TAG in criteria.selected_tags and not atom.flag_for_deletion:
        return False
    if NO_TAG_PSEUDO_TAG in criteria.selected_tags and tags:
        return False

    if not criteria.real_tags.issubset(tags):
        return False

    if criteria.idea_id is None:
        return not atom.hidden
    return atom.id in context.idea_child_ids


@dataclass(frozen=True)
class GallerySnapshot:
    """What the gallery shows for the current criteria.

    Attributes:
        atoms: Revealed atoms.
        total: Number of atoms passing the filter.
        has_more: Whether ``reveal_more`` would show more atoms.
        pending: True while an idea's children are loading; ``atoms`` then
            holds the last good result.
    """

    atoms: List[Atom] = field(default_factory=list)
    total: int = 0
    has_more: bool = False
    pending: bool = False


class GalleryView:
    """Filtered, lazily revealed view over a CollectionStore.

    Tag and creator selection come from the store's selection state; the
    remaining predicates are passed per call.

    Example:
        >>> view = GalleryView(store, initial_page_size=30, page_size_increment=30)
        >>> snapshot = view.snapshot(view.criteria(search_term="sunset"))
        >>> view.reveal_more()
        60
    """

    def __init__(
        self,
        store: "CollectionStore",
        initial_page_size: int = 30,
        page_size_increment: int = 30,
    ) -> None:
        self._store = store
        self._window = RevealWindow(initial_page_size, page_size_increment)
        self._last = GallerySnapshot()

    @property
    def window(self) -> RevealWindow:
        return self._window

    def criteria(
        self,
        search_term: str = "",
        content_types: Iterable[str] = (),
        show_only_favorites: bool = False,
        idea_id: Optional[int] = None,
    ) -> FilterCriteria:
        """Build criteria from the store selection plus the given predicates."""
        creators = (self._store.selected_creator,) if self._store.selected_creator else ()
        return FilterCriteria(
            search_term=search_term,
            content_types=frozenset(content_types),
            creators=frozenset(creators),
            selected_tags=frozenset(self._store.selected_tags),
            show_only_favorites=show_only_favorites,
            idea_id=idea_id,
        )

    async def load_idea_children(self, idea_id: int) -> FrozenSet[int]:
        """Fetch the children of an idea into the store's cache."""
        child_ids = frozenset(await self._store.fetch_child_atom_ids(idea_id))
        logger.info(f"Loaded {len(child_ids)} children of idea {idea_id}")
        return child_ids

    def forget_idea_children(self, idea_id: int) -> None:
        self._store.idea_children.pop(idea_id, None)

    def snapshot(self, criteria: FilterCriteria) -> GallerySnapshot:
        """Filter the store's atoms and reveal the current window.

        While the active idea's children are not loaded the previous
        snapshot is returned with ``pending=True``.
        """
        child_ids = None
        if criteria.idea_id is not None:
            child_ids = self._store.idea_children.get(criteria.idea_id)
            if child_ids is None:
                return GallerySnapshot(
                    atoms=self._last.atoms,
                    total=self._last.total,
                    has_more=self._last.has_more,
                    pending=True,
                )

        context = build_filter_context(self._store, child_ids)
        self._window.sync(filter_signature(criteria, context))
        visible = filter_atoms(self._store.atoms, criteria, context)
        self._last = GallerySnapshot(
            atoms=self._window.slice(visible),
            total=len(visible),
            has_more=self._window.has_more(len(visible)),
        )
        return self._last

    def reveal_more(self) -> int:
        """Grow the window by one increment, capped at the last total."""
        return self._window.reveal_more(self._last.total)
