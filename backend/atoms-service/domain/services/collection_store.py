"""Collection store domain service for the atom catalog.

This module contains the CollectionStore, the in-memory mirror of every
remote collection. It is constructed explicitly around a remote store and
injected into its consumers; there is no module-level instance.

Local-state contract:
    - Inserts append the row returned by the remote store.
    - Updates patch the local copy with the same (normalized) partial that
      was written, never with a value read back from the store.
    - Local state only changes after the remote call succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
)

from domain.entities.atom import Atom
from domain.entities.category import Category
from domain.entities.creator import Creator
from domain.entities.relationships import AtomRelationship, CategoryTag, CreatorTag
from domain.entities.tag import Tag
from domain.errors import (
    EntityNotFoundError,
    PartialConsistencyError,
    PersistenceError,
    RemoteError,
    ValidationError,
)
from domain.repositories.remote_store import Collections, OrderBy, RemoteStoreInterface
from domain.services.normalization import (
    normalize_tag_name,
    normalize_tags,
    split_creator_names,
)
from domain.services.relationship_service import tags_for_category, tags_for_creator

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_KEY = "default_category"
FAVORITE_CREATORS_KEY = "favorite_creators"

CATEGORY_FIELDS = frozenset({"name", "description", "is_private"})
CREATOR_FIELDS = frozenset({"name", "count", "link_1", "link_2", "link_3"})


class CollectionStore:
    """In-memory mirror of the remote catalog collections.

    Attributes:
        atoms (List[Atom]): Atoms in fetch order (newest first), new atoms appended.
        tags (List[Tag]): Tags ordered by usage count.
        categories (List[Category]): Categories ordered by name.
        creators (List[Creator]): Creators ordered by usage count.
        category_tags (List[CategoryTag]): Flat category/tag join table.
        creator_tags (List[CreatorTag]): Flat creator/tag join table.
        selected_tags (List[str]): Selected tag names, pseudo-tags included.
        selected_creator (Optional[str]): Creator picked in the gallery.
        deleting_ids (Set[int]): Atoms whose deletion is in flight or failed.
        default_category_id (Optional[int]): Persisted default category.
        favorite_creators (List[str]): Persisted favorite creator names.
        idea_children (Dict[int, FrozenSet[int]]): Child ids of the ideas
            loaded so far, kept in step with relationship writes.
        loading (bool): True while atoms are being fetched.

    Example:
        >>> store = CollectionStore(SqlAlchemyRemoteStore(SessionLocal))
        >>> await store.initialize()
        >>> atom = await store.add_atom({"title": "Sunset", "content_type": "image", "tags": ["Sky"]})
        >>> atom.tags
        ['sky']
    """

    def __init__(
        self,
        remote_store: RemoteStoreInterface,
        connection_retries: int = 3,
        retry_base_delay: float = 1.0,
    ) -> None:
        """Initialize an empty store around a remote store.

        Args:
            remote_store (RemoteStoreInterface): Remote collections.
            connection_retries (int): Attempts made by ``test_connection``.
            retry_base_delay (float): First backoff delay in seconds, doubled per attempt.
        """
        self._remote = remote_store
        self._connection_retries = connection_retries
        self._retry_base_delay = retry_base_delay

        self.atoms: List[Atom] = []
        self.tags: List[Tag] = []
        self.categories: List[Category] = []
        self.creators: List[Creator] = []
        self.category_tags: List[CategoryTag] = []
        self.creator_tags: List[CreatorTag] = []
        self.selected_tags: List[str] = []
        self.selected_creator: Optional[str] = None
        self.deleting_ids: Set[int] = set()
        self.default_category_id: Optional[int] = None
        self.favorite_creators: List[str] = []
        self.idea_children: Dict[int, FrozenSet[int]] = {}
        self.loading = False

    @property
    def remote_store(self) -> RemoteStoreInterface:
        return self._remote

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def test_connection(self) -> bool:
        """Probe the remote store, retrying with exponential backoff.

        Returns:
            bool: True once a probe succeeds, False after all attempts failed.
        """
        for attempt in range(self._connection_retries):
            try:
                await self._remote.select(Collections.ATOMS, columns=("id",))
                logger.info("Remote store connection successful")
                return True
            except RemoteError as e:
                logger.error(f"Remote store connection attempt {attempt + 1} failed: {e}")
                if attempt < self._connection_retries - 1:
                    await asyncio.sleep(self._retry_base_delay * 2**attempt)
        logger.error("All remote store connection attempts failed")
        return False

    async def initialize(self) -> None:
        """Check connectivity, then load every collection.

        Raises:
            RemoteError: If the store is unreachable or a primary fetch fails.
        """
        if not await self.test_connection():
            raise RemoteError(
                f"Remote store connection failed after {self._connection_retries} attempts"
            )

        await asyncio.gather(
            self.fetch_atoms(),
            self.fetch_tags(),
            self.fetch_categories(),
            self.fetch_creators(),
        )
        # Join tables resolve against the freshly fetched tags.
        await self.fetch_category_tags()
        await self.fetch_creator_tags()
        await self.fetch_default_category()
        await self.fetch_favorite_creators()
        logger.info(
            f"Loaded {len(self.atoms)} atoms, {len(self.tags)} tags, "
            f"{len(self.categories)} categories, {len(self.creators)} creators"
        )

    async def fetch_atoms(self) -> List[Atom]:
        """Load atoms newest first, normalizing their tags."""
        self.loading = True
        try:
            rows = await self._remote.select(
                Collections.ATOMS, order=OrderBy("created_at", ascending=False)
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch atoms: {e}")
            raise
        finally:
            self.loading = False

        self.atoms = [self._normalized(Atom.from_row(row)) for row in rows]
        return self.atoms

    async def fetch_tags(self) -> List[Tag]:
        """Load tags ordered by usage count, normalizing their names."""
        try:
            rows = await self._remote.select(
                Collections.TAGS, order=OrderBy("count", ascending=False)
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch tags: {e}")
            raise
        tags: List[Tag] = []
        for row in rows:
            try:
                tags.append(Tag.from_row(row))
            except ValueError as e:
                logger.warning(f"Skipping tag row {row.get('id')}: {e}")
        self.tags = tags
        return self.tags

    async def fetch_categories(self) -> List[Category]:
        try:
            rows = await self._remote.select(
                Collections.CATEGORIES, order=OrderBy("name")
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch categories: {e}")
            raise
        self.categories = [Category.from_row(row) for row in rows]
        return self.categories

    async def fetch_creators(self) -> List[Creator]:
        try:
            rows = await self._remote.select(
                Collections.CREATORS, order=OrderBy("count", ascending=False)
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch creators: {e}")
            raise
        self.creators = [Creator.from_row(row) for row in rows]
        return self.creators

    async def fetch_category_tags(self) -> List[CategoryTag]:
        """Reload the category/tag join table; failures keep the prior rows."""
        try:
            rows = await self._remote.select(Collections.CATEGORY_TAGS)
        except RemoteError as e:
            logger.error(f"Failed to fetch category tags: {e}")
            return self.category_tags
        self.category_tags = [CategoryTag.from_row(row) for row in rows]
        return self.category_tags

    async def fetch_creator_tags(self) -> List[CreatorTag]:
        """Reload the creator/tag join table; failures keep the prior rows."""
        try:
            rows = await self._remote.select(Collections.CREATOR_TAGS)
        except RemoteError as e:
            logger.error(f"Failed to fetch creator tags: {e}")
            return self.creator_tags
        self.creator_tags = [CreatorTag.from_row(row) for row in rows]
        return self.creator_tags

    async def fetch_default_category(self) -> Optional[int]:
        """Load the persisted default category; a missing row means none."""
        value = await self._read_setting(DEFAULT_CATEGORY_KEY)
        if value is not _UNREADABLE:
            self.default_category_id = (value or {}).get("categoryId")
        return self.default_category_id

    async def fetch_favorite_creators(self) -> List[str]:
        value = await self._read_setting(FAVORITE_CREATORS_KEY)
        if value is not _UNREADABLE:
            self.favorite_creators = list((value or {}).get("creators") or [])
        return self.favorite_creators

    async def fetch_child_atom_ids(self, parent_id: int) -> List[int]:
        """Ids of the atoms grouped under an idea, in insertion order."""
        try:
            rows = await self._remote.select(
                Collections.ATOM_RELATIONSHIPS,
                columns=("child_atom_id",),
                filters={"parent_atom_id": parent_id},
                order=OrderBy("id"),
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch children of atom {parent_id}: {e}")
            raise
        child_ids: List[int] = []
        for row in rows:
            if row["child_atom_id"] not in child_ids:
                child_ids.append(row["child_atom_id"])
        self.idea_children[parent_id] = frozenset(child_ids)
        return child_ids

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_atom(self, atom_id: int) -> Atom:
        return self._find(self.atoms, atom_id, "Atom")

    def get_tag(self, tag_id: int) -> Tag:
        return self._find(self.tags, tag_id, "Tag")

    def get_category(self, category_id: int) -> Category:
        return self._find(self.categories, category_id, "Category")

    def get_creator(self, creator_id: int) -> Creator:
        return self._find(self.creators, creator_id, "Creator")

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        normalized = normalize_tag_name(name)
        return next((tag for tag in self.tags if tag.name == normalized), None)

    def get_category_tags(self, category_id: int) -> List[Tag]:
        """Tags of a category, derived from the join table on every call."""
        return tags_for_category(category_id, self.category_tags, self.tags)

    def get_creator_tags(self, creator_id: int) -> List[Tag]:
        """Tags of a creator, derived from the join table on every call."""
        return tags_for_creator(creator_id, self.creator_tags, self.tags)

    # ------------------------------------------------------------------
    # Atoms
    # ------------------------------------------------------------------

    async def add_atom(self, atom: Mapping[str, Any]) -> Atom:
        """Insert an atom and append the stored row to local state.

        Tags are normalized before the write and missing tag rows are
        created first, so every tag on the stored atom has a tag row.

        Args:
            atom (Mapping[str, Any]): Atom fields; ``title`` and ``content_type`` required.

        Returns:
            Atom: The atom as stored by the remote store.

        Raises:
            ValidationError: If required fields are missing or unknown fields given.
            PersistenceError: If a remote write fails. Local atoms are unchanged.
        """
        payload = self._atom_payload(atom)
        for required in ("title", "content_type"):
            if not payload.get(required):
                raise ValidationError(f"Atom field '{required}' is required")
        if "tags" in payload:
            payload["tags"] = normalize_tags(payload["tags"])
            await self._ensure_tags_exist(payload["tags"])

        rows = await self._persist(
            "add atom", self._remote.insert(Collections.ATOMS, [payload])
        )
        created = self._normalized(Atom.from_row(rows[0]))
        self.atoms = [*self.atoms, created]
        logger.info(f"Added atom {created.id} ({created.content_type})")
        return created

    async def add_atom_with_creators(self, atom: Mapping[str, Any]) -> Atom:
        """Insert an atom, then make sure its creators exist and link them.

        Raises:
            PartialConsistencyError: If linking failed after the atom was stored.
        """
        created = await self.add_atom(atom)
        names = created.creator_names()
        if not names:
            return created
        try:
            await self._link_creators(created.id, names)
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Atom {created.id} was added but linking its creators failed: {e}",
                [f"inserted atom {created.id}"],
            ) from e
        return created

    async def update_atom(self, atom_id: int, partial: Mapping[str, Any]) -> Atom:
        """Write a partial update and patch the local copy with it.

        Args:
            atom_id (int): Atom to update.
            partial (Mapping[str, Any]): Fields to change.

        Returns:
            Atom: The patched local atom, or a detached snapshot if the atom
            is not in local state.

        Raises:
            ValidationError: If the partial is empty or names unknown fields.
            PersistenceError: If the remote write fails.
            PartialConsistencyError: If the atom was written but re-linking
                its creators failed.
        """
        patch = self._atom_payload(partial)
        if not patch:
            raise ValidationError("No fields to update")
        if "tags" in patch:
            patch["tags"] = normalize_tags(patch["tags"])
            await self._ensure_tags_exist(patch["tags"])

        await self._persist(
            f"update atom {atom_id}",
            self._remote.update(Collections.ATOMS, patch, {"id": atom_id}),
        )
        self._patch_local_atoms(lambda atom: atom.id == atom_id, patch)

        if patch.get("creator_name"):
            try:
                await self._relink_creators(atom_id, split_creator_names(patch["creator_name"]))
            except RemoteError as e:
                raise PartialConsistencyError(
                    f"Atom {atom_id} was updated but re-linking its creators failed: {e}",
                    [f"updated atom {atom_id}"],
                ) from e

        return next(
            (atom for atom in self.atoms if atom.id == atom_id),
            Atom(id=atom_id, title=patch.get("title", ""), content_type=patch.get("content_type", "")),
        )

    async def update_atoms_matching(
        self, filters: Mapping[str, Any], partial: Mapping[str, Any]
    ) -> None:
        """Write one bulk update and patch every local atom matching ``filters``."""
        patch = self._atom_payload(partial)
        await self._persist(
            "bulk update atoms", self._remote.update(Collections.ATOMS, patch, filters)
        )
        self._patch_local_atoms(
            lambda atom: all(getattr(atom, k) == v for k, v in filters.items()), patch
        )

    async def delete_atom(self, atom_id: int) -> None:
        """Delete an atom remotely, then locally.

        The id is added to ``deleting_ids`` before the call and removed only
        once the deletion is confirmed. On failure it stays there so callers
        can surface or retry the deletion.

        Raises:
            PersistenceError: If the remote delete fails.
        """
        self.deleting_ids.add(atom_id)
        await self._persist(
            f"delete atom {atom_id}",
            self._remote.delete(Collections.ATOMS, {"id": atom_id}),
        )
        self.deleting_ids.discard(atom_id)
        self.atoms = [atom for atom in self.atoms if atom.id != atom_id]
        logger.info(f"Deleted atom {atom_id}")

    async def set_atoms_hidden(self, atom_ids: Sequence[int], hidden: bool) -> None:
        """Hide or unhide several atoms, one write each.

        Raises:
            PartialConsistencyError: If a write failed; earlier writes stay applied.
        """
        completed: List[str] = []
        for atom_id in atom_ids:
            try:
                await self.update_atom(atom_id, {"hidden": hidden})
            except RemoteError as e:
                raise PartialConsistencyError(
                    f"Setting hidden={hidden} failed at atom {atom_id}: {e}", completed
                ) from e
            completed.append(f"updated atom {atom_id}")

    async def rewrite_tag_on_atoms(self, old_name: str, new_name: str) -> List[int]:
        """Replace one tag name with another on every atom carrying it.

        Atoms are read from the remote store, not from local state, so atoms
        that were never fetched are rewritten too. Stored tags are compared
        after normalization, so ``"Sky "`` counts as ``sky``. Re-running after
        a failure only touches the atoms still carrying ``old_name``.

        Returns:
            List[int]: Ids of the rewritten atoms.

        Raises:
            PartialConsistencyError: If an atom could not be read or rewritten.
        """
        old_name = normalize_tag_name(old_name)
        new_name = normalize_tag_name(new_name)
        try:
            rows = await self._remote.select(Collections.ATOMS, columns=("id", "tags"))
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Could not read atoms tagged '{old_name}': {e}"
            ) from e

        rewritten: List[int] = []
        for row in rows:
            stored = row.get("tags") or []
            if old_name not in normalize_tags(stored):
                continue
            tags = [
                new_name if normalize_tag_name(tag) == old_name else tag for tag in stored
            ]
            try:
                await self.update_atom(row["id"], {"tags": tags})
            except RemoteError as e:
                raise PartialConsistencyError(
                    f"Rewriting '{old_name}' -> '{new_name}' failed at atom {row['id']}: {e}",
                    [f"rewrote atom {atom_id}" for atom_id in rewritten],
                ) from e
            rewritten.append(row["id"])
        return rewritten

    async def add_child_atom(self, parent_id: int, child_id: int) -> bool:
        """Group an atom under an idea.

        Returns:
            bool: True if a relationship row was created, False if it existed.

        Raises:
            ValidationError: If an atom is made a child of itself.
            PersistenceError: If the remote store fails.
        """
        try:
            relationship = AtomRelationship(parent_atom_id=parent_id, child_atom_id=child_id)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        filters = {
            "parent_atom_id": relationship.parent_atom_id,
            "child_atom_id": relationship.child_atom_id,
        }
        existing = await self._persist(
            "read atom relationship",
            self._remote.select(Collections.ATOM_RELATIONSHIPS, filters=filters),
        )
        if existing:
            self._cache_child(parent_id, child_id, present=True)
            return False
        await self._persist(
            "add atom relationship",
            self._remote.insert(Collections.ATOM_RELATIONSHIPS, [filters]),
        )
        self._cache_child(parent_id, child_id, present=True)
        logger.info(f"Added atom {child_id} to idea {parent_id}")
        return True

    async def remove_child_atom(self, parent_id: int, child_id: int) -> None:
        await self._persist(
            "remove atom relationship",
            self._remote.delete(
                Collections.ATOM_RELATIONSHIPS,
                {"parent_atom_id": parent_id, "child_atom_id": child_id},
            ),
        )
        self._cache_child(parent_id, child_id, present=False)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def add_tag(
        self,
        name: str,
        is_private: bool = False,
        category_id: Optional[int] = None,
    ) -> Tag:
        """Create a tag unless its normalized name already exists locally.

        Returns:
            Tag: The created tag, or the existing one (no remote call).

        Raises:
            ValidationError: If the name is empty after normalization.
            PersistenceError: If the remote insert fails.
        """
        normalized = normalize_tag_name(name or "")
        if not normalized:
            raise ValidationError("Tag name cannot be empty or whitespace")
        existing = self.find_tag_by_name(normalized)
        if existing:
            return existing

        row: Dict[str, Any] = {"name": normalized, "is_private": is_private}
        if category_id is not None:
            row["category_id"] = category_id
        rows = await self._persist(
            f"add tag '{normalized}'", self._remote.insert(Collections.TAGS, [row])
        )
        created = Tag.from_row(rows[0])
        self.tags = [*self.tags, created]
        return created

    async def update_tag(
        self,
        tag_id: int,
        name: Optional[str] = None,
        is_private: Optional[bool] = None,
    ) -> Tag:
        """Rename a tag and/or change its private flag.

        A rename is carried over to every atom carrying the old name.

        Raises:
            EntityNotFoundError: If the tag is unknown.
            ValidationError: If the new name is empty or taken by another tag.
            PersistenceError: If the tag write fails.
            PartialConsistencyError: If the tag was renamed but some atoms were not.
        """
        tag = self.get_tag(tag_id)
        updates: Dict[str, Any] = {}
        if name is not None:
            new_name = normalize_tag_name(name)
            if not new_name:
                raise ValidationError("Tag name cannot be empty or whitespace")
            duplicate = self.find_tag_by_name(new_name)
            if duplicate and duplicate.id != tag_id:
                raise ValidationError(f"Tag with name '{new_name}' already exists")
            if new_name != tag.name:
                updates["name"] = new_name
        if is_private is not None:
            updates["is_private"] = is_private
        if not updates:
            return tag

        await self._persist(
            f"update tag {tag_id}",
            self._remote.update(Collections.TAGS, updates, {"id": tag_id}),
        )
        updated = Tag(
            id=tag.id,
            name=updates.get("name", tag.name),
            count=tag.count,
            is_private=updates.get("is_private", tag.is_private),
            category_id=tag.category_id,
            created_at=tag.created_at,
        )
        self.tags = [updated if t.id == tag_id else t for t in self.tags]

        if "name" in updates:
            await self.rewrite_tag_on_atoms(tag.name, updated.name)
        return updated

    async def delete_tag(self, tag_id: int) -> None:
        await self._persist(
            f"delete tag {tag_id}", self._remote.delete(Collections.TAGS, {"id": tag_id})
        )
        self.tags = [tag for tag in self.tags if tag.id != tag_id]

    async def assign_tag_to_category(self, category_id: int, tag_id: int) -> None:
        await self._persist(
            f"assign tag {tag_id} to category {category_id}",
            self._remote.insert(
                Collections.CATEGORY_TAGS, [{"category_id": category_id, "tag_id": tag_id}]
            ),
        )
        await self.fetch_category_tags()

    async def remove_tag_from_category(self, category_id: int, tag_id: int) -> None:
        await self._persist(
            f"remove tag {tag_id} from category {category_id}",
            self._remote.delete(
                Collections.CATEGORY_TAGS, {"category_id": category_id, "tag_id": tag_id}
            ),
        )
        await self.fetch_category_tags()

    async def assign_tag_to_creator(self, creator_id: int, tag_id: int) -> None:
        await self._persist(
            f"assign tag {tag_id} to creator {creator_id}",
            self._remote.insert(
                Collections.CREATOR_TAGS, [{"creator_id": creator_id, "tag_id": tag_id}]
            ),
        )
        await self.fetch_creator_tags()

    async def remove_tag_from_creator(self, creator_id: int, tag_id: int) -> None:
        await self._persist(
            f"remove tag {tag_id} from creator {creator_id}",
            self._remote.delete(
                Collections.CREATOR_TAGS, {"creator_id": creator_id, "tag_id": tag_id}
            ),
        )
        await self.fetch_creator_tags()

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def add_category(
        self, name: str, description: Optional[str] = None, is_private: bool = False
    ) -> Category:
        if not name or not name.strip():
            raise ValidationError("Category name cannot be empty")
        rows = await self._persist(
            f"add category '{name}'",
            self._remote.insert(
                Collections.CATEGORIES,
                [{"name": name.strip(), "description": description, "is_private": is_private}],
            ),
        )
        created = Category.from_row(rows[0])
        self.categories = [*self.categories, created]
        return created

    async def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        is_private: Optional[bool] = None,
        description: Optional[str] = None,
    ) -> Category:
        """Change any of a category's name, privacy flag or description.

        Raises:
            EntityNotFoundError: If the category is unknown.
            ValidationError: If nothing is given or the new name is empty.
            PersistenceError: If the remote write fails.
        """
        category = self.get_category(category_id)
        partial: Dict[str, Any] = {}
        if name is not None:
            partial["name"] = name.strip()
        if is_private is not None:
            partial["is_private"] = is_private
        if description is not None:
            partial["description"] = description
        patch = self._checked_partial(partial, CATEGORY_FIELDS, "category")
        await self._persist(
            f"update category {category_id}",
            self._remote.update(Collections.CATEGORIES, patch, {"id": category_id}),
        )
        updated = replace(category, **patch)
        self.categories = [updated if c.id == category_id else c for c in self.categories]
        return updated

    async def delete_category(self, category_id: int) -> None:
        """Delete a category; clears the default category if it was this one.

        Raises:
            PersistenceError: If the category could not be deleted.
            PartialConsistencyError: If it was deleted but clearing the
                default category setting failed.
        """
        await self._persist(
            f"delete category {category_id}",
            self._remote.delete(Collections.CATEGORIES, {"id": category_id}),
        )
        self.categories = [c for c in self.categories if c.id != category_id]
        self.category_tags = [
            row for row in self.category_tags if row.category_id != category_id
        ]

        if self.default_category_id == category_id:
            try:
                await self.set_default_category(None)
            except RemoteError as e:
                self.default_category_id = None
                raise PartialConsistencyError(
                    f"Category {category_id} was deleted but clearing the default failed: {e}",
                    [f"deleted category {category_id}"],
                ) from e

    async def set_default_category(self, category_id: Optional[int]) -> None:
        await self._persist(
            "set default category",
            self._remote.upsert(
                Collections.SETTINGS,
                {"key": DEFAULT_CATEGORY_KEY, "value": {"categoryId": category_id}},
                conflict_key="key",
            ),
        )
        self.default_category_id = category_id

    # ------------------------------------------------------------------
    # Creators
    # ------------------------------------------------------------------

    async def add_creator(self, name: str, **links: Optional[str]) -> Creator:
        if not name or not name.strip():
            raise ValidationError("Creator name cannot be empty")
        row = self._checked_partial({"name": name.strip(), **links}, CREATOR_FIELDS, "creator")
        rows = await self._persist(
            f"add creator '{name}'", self._remote.insert(Collections.CREATORS, [row])
        )
        created = Creator.from_row(rows[0])
        self.creators = [*self.creators, created]
        return created

    async def update_creator(self, creator_id: int, partial: Mapping[str, Any]) -> Creator:
        creator = self.get_creator(creator_id)
        patch = self._checked_partial(partial, CREATOR_FIELDS, "creator")
        await self._persist(
            f"update creator {creator_id}",
            self._remote.update(Collections.CREATORS, patch, {"id": creator_id}),
        )
        updated = replace(creator, **patch)
        self.creators = [updated if c.id == creator_id else c for c in self.creators]
        return updated

    async def delete_creator(self, creator_id: int) -> None:
        await self._persist(
            f"delete creator {creator_id}",
            self._remote.delete(Collections.CREATORS, {"id": creator_id}),
        )
        self.creators = [c for c in self.creators if c.id != creator_id]

    async def toggle_favorite_creator(self, creator_name: str) -> List[str]:
        """Add or remove a creator from the persisted favorites."""
        if creator_name in self.favorite_creators:
            favorites = [name for name in self.favorite_creators if name != creator_name]
        else:
            favorites = [*self.favorite_creators, creator_name]
        await self._persist(
            "update favorite creators",
            self._remote.upsert(
                Collections.SETTINGS,
                {"key": FAVORITE_CREATORS_KEY, "value": {"creators": favorites}},
                conflict_key="key",
            ),
        )
        self.favorite_creators = favorites
        return favorites

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_tag(self, tag_name: str) -> bool:
        """Flip a tag's membership in the selection.

        Returns:
            bool: True if the tag is selected after the call.
        """
        normalized = normalize_tag_name(tag_name)
        if normalized in self.selected_tags:
            self.selected_tags = [t for t in self.selected_tags if t != normalized]
            return False
        self.selected_tags = [*self.selected_tags, normalized]
        return True

    def clear_selected_tags(self) -> None:
        self.selected_tags = []

    def set_selected_creator(self, creator_name: Optional[str]) -> None:
        self.selected_creator = creator_name

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _persist(self, description: str, call):
        """Await a remote call, turning failures into ``PersistenceError``."""
        try:
            return await call
        except RemoteError as e:
            logger.error(f"Failed to {description}: {e}")
            raise PersistenceError(
                f"Failed to {description}: {e}", e.collection, e.operation
            ) from e

    async def _ensure_tags_exist(self, names: Iterable[str]) -> None:
        """Create tag rows for names unknown locally and remotely."""
        for name in names:
            if self.find_tag_by_name(name):
                continue
            rows = await self._persist(
                f"look up tag '{name}'",
                self._remote.select(Collections.TAGS, filters={"name": name}),
            )
            if rows:
                self.tags = [*self.tags, Tag.from_row(rows[0])]
            else:
                await self.add_tag(name)

    async def _link_creators(self, atom_id: int, names: Sequence[str]) -> None:
        creator_ids = await self._ensure_creators(names)
        for creator_id in creator_ids:
            await self._remote.insert(
                Collections.ATOM_CREATORS, [{"atom_id": atom_id, "creator_id": creator_id}]
            )

    async def _relink_creators(self, atom_id: int, names: Sequence[str]) -> None:
        creator_ids = await self._ensure_creators(names)
        await self._remote.delete(Collections.ATOM_CREATORS, {"atom_id": atom_id})
        for creator_id in creator_ids:
            await self._remote.insert(
                Collections.ATOM_CREATORS, [{"atom_id": atom_id, "creator_id": creator_id}]
            )

    async def _ensure_creators(self, names: Sequence[str]) -> List[int]:
        """Return creator ids for ``names``, creating missing creators."""
        known = {
            row["name"]: row["id"]
            for row in await self._remote.select(Collections.CREATORS)
        }
        creator_ids: List[int] = []
        for name in names:
            if name not in known:
                rows = await self._remote.insert(
                    Collections.CREATORS, [{"name": name, "count": 1}]
                )
                created = Creator.from_row(rows[0])
                self.creators = [*self.creators, created]
                known[name] = created.id
            if known[name] not in creator_ids:
                creator_ids.append(known[name])
        return creator_ids

    async def _read_setting(self, key: str):
        try:
            rows = await self._remote.select(
                Collections.SETTINGS, columns=("value",), filters={"key": key}
            )
        except RemoteError as e:
            logger.error(f"Failed to fetch setting '{key}': {e}")
            return _UNREADABLE
        if not rows:
            logger.info(f"No '{key}' setting stored")
            return None
        return rows[0].get("value")

    def _patch_local_atoms(self, predicate, patch: Mapping[str, Any]) -> None:
        self.atoms = [
            atom.with_updates(patch) if predicate(atom) else atom for atom in self.atoms
        ]

    def _atom_payload(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(values) - Atom.writable_fields()
        if unknown:
            raise ValidationError(f"Unknown atom fields: {', '.join(sorted(unknown))}")
        return dict(values)

    def _checked_partial(
        self, values: Mapping[str, Any], allowed: frozenset, kind: str
    ) -> Dict[str, Any]:
        unknown = set(values) - allowed
        if unknown:
            raise ValidationError(f"Unknown {kind} fields: {', '.join(sorted(unknown))}")
        if not values:
            raise ValidationError("No fields to update")
        if "name" in values and not (values["name"] or "").strip():
            raise ValidationError(f"{kind.capitalize()} name cannot be empty")
        return dict(values)

    def _cache_child(self, parent_id: int, child_id: int, present: bool) -> None:
        cached = self.idea_children.get(parent_id)
        if cached is None:
            return
        if present:
            self.idea_children[parent_id] = cached | {child_id}
        else:
            self.idea_children[parent_id] = cached - {child_id}

    def _normalized(self, atom: Atom) -> Atom:
        return atom.with_updates({"tags": normalize_tags(atom.tags)})

    def _find(self, collection, entity_id: int, kind: str):
        for entity in collection:
            if entity.id == entity_id:
                return entity
        raise EntityNotFoundError(f"{kind} with ID {entity_id} not found")


# Sentinel for a setting that could not be read (as opposed to a missing row).
_UNREADABLE = object()
