"""Relationship and merge domain service.

This module derives the many-to-many tag lookups from the flat join tables
and implements the merge operations that collapse a duplicate tag,
category or creator into a canonical survivor.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence

from domain.entities.relationships import CategoryTag, CreatorTag
from domain.entities.tag import Tag
from domain.errors import PartialConsistencyError, RemoteError, ValidationError
from domain.repositories.remote_store import Collections

if TYPE_CHECKING:
    from domain.services.collection_store import CollectionStore

logger = logging.getLogger(__name__)


def _group_tag_ids(rows: Iterable, owner_attr: str) -> Dict[int, List[int]]:
    groups: Dict[int, List[int]] = {}
    for row in rows:
        tag_ids = groups.setdefault(getattr(row, owner_attr), [])
        if row.tag_id not in tag_ids:
            tag_ids.append(row.tag_id)
    return groups


def _resolve(tag_ids: Iterable[int], tags_by_id: Dict[int, Tag]) -> List[Tag]:
    # Join rows pointing at unknown tags are dropped (inner join).
    return [tags_by_id[tag_id] for tag_id in tag_ids if tag_id in tags_by_id]


def build_category_tag_lookup(
    category_tags: Sequence[CategoryTag], tags: Sequence[Tag]
) -> Dict[int, List[Tag]]:
    """Map each category id to its tags.

    Args:
        category_tags (Sequence[CategoryTag]): Flat join table rows.
        tags (Sequence[Tag]): Tag collection.

    Returns:
        Dict[int, List[Tag]]: Deduplicated tags per category, in join order.
    """
    tags_by_id = {tag.id: tag for tag in tags}
    return {
        category_id: _resolve(tag_ids, tags_by_id)
        for category_id, tag_ids in _group_tag_ids(category_tags, "category_id").items()
    }


def build_creator_tag_lookup(
    creator_tags: Sequence[CreatorTag], tags: Sequence[Tag]
) -> Dict[int, List[Tag]]:
    """Map each creator id to its tags."""
    tags_by_id = {tag.id: tag for tag in tags}
    return {
        creator_id: _resolve(tag_ids, tags_by_id)
        for creator_id, tag_ids in _group_tag_ids(creator_tags, "creator_id").items()
    }


def tags_for_category(
    category_id: int, category_tags: Sequence[CategoryTag], tags: Sequence[Tag]
) -> List[Tag]:
    return build_category_tag_lookup(
        [row for row in category_tags if row.category_id == category_id], tags
    ).get(category_id, [])


def tags_for_creator(
    creator_id: int, creator_tags: Sequence[CreatorTag], tags: Sequence[Tag]
) -> List[Tag]:
    return build_creator_tag_lookup(
        [row for row in creator_tags if row.creator_id == creator_id], tags
    ).get(creator_id, [])


class MergeService:
    """Domain service collapsing duplicate taxonomy entities.

    Every merge is a sequence of independent remote writes. None of them is
    atomic: a failure part way raises ``PartialConsistencyError`` and leaves
    the source entity in place, so re-running the merge completes it.

    Attributes:
        _store (CollectionStore): Store whose collections are merged.

    Example:
        >>> merges = MergeService(store)
        >>> await merges.merge_tag(source_id=4, target_id=9)
    """

    def __init__(self, store: "CollectionStore") -> None:
        self._store = store

    async def merge_tag(self, source_id: int, target_id: int) -> List[int]:
        """Merge the source tag into the target tag.

        Rewrites the source name to the target name on every atom carrying
        it, repoints the source's category and creator join rows to the
        target, and deletes the source tag last.

        Args:
            source_id (int): Tag to remove.
            target_id (int): Surviving tag.

        Returns:
            List[int]: Ids of the atoms that were rewritten.

        Raises:
            ValidationError: If source and target are the same tag.
            EntityNotFoundError: If either tag is unknown.
            PartialConsistencyError: If a step failed after others committed.
        """
        self._reject_self_merge("tag", source_id, target_id)
        source = self._store.get_tag(source_id)
        target = self._store.get_tag(target_id)
        logger.info(f"Merging tag '{source.name}' into '{target.name}'")

        rewritten = await self._store.rewrite_tag_on_atoms(source.name, target.name)
        completed = [f"rewrote atom {atom_id}" for atom_id in rewritten]

        remote = self._store.remote_store
        try:
            await remote.update(
                Collections.CATEGORY_TAGS, {"tag_id": target_id}, {"tag_id": source_id}
            )
            completed.append("repointed category tags")
            await remote.update(
                Collections.CREATOR_TAGS, {"tag_id": target_id}, {"tag_id": source_id}
            )
            completed.append("repointed creator tags")
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Tag merge {source_id} -> {target_id} failed repointing join rows: {e}",
                completed,
            ) from e
        await self._store.fetch_category_tags()
        await self._store.fetch_creator_tags()

        try:
            await self._store.delete_tag(source_id)
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Tag merge {source_id} -> {target_id} failed deleting the source tag: {e}",
                completed,
            ) from e

        logger.info(
            f"Merged tag '{source.name}' into '{target.name}' across {len(rewritten)} atoms"
        )
        return rewritten

    async def merge_category(self, source_id: int, target_id: int) -> None:
        """Merge the source category into the target category.

        Every category_tags row of the source is repointed to the target,
        then the source is deleted. Duplicate (target, tag) rows may result;
        lookups deduplicate them.

        Raises:
            ValidationError: If source and target are the same category.
            EntityNotFoundError: If either category is unknown.
            PartialConsistencyError: If the source could not be deleted after repointing.
        """
        self._reject_self_merge("category", source_id, target_id)
        self._store.get_category(source_id)
        self._store.get_category(target_id)
        logger.info(f"Merging category {source_id} into {target_id}")

        try:
            await self._store.remote_store.update(
                Collections.CATEGORY_TAGS,
                {"category_id": target_id},
                {"category_id": source_id},
            )
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Category merge {source_id} -> {target_id} failed repointing tags: {e}"
            ) from e
        await self._store.fetch_category_tags()

        try:
            await self._store.delete_category(source_id)
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Category merge {source_id} -> {target_id} failed deleting the source: {e}",
                ["repointed category tags"],
            ) from e

    async def merge_creator(self, source_id: int, target_id: int) -> None:
        """Merge the source creator into the target creator.

        Only atoms whose legacy ``creator_name`` equals the source name
        exactly are rewritten; comma-joined multi-creator strings are left
        as they are, and the atom_creators join table is not touched.

        Raises:
            ValidationError: If source and target are the same creator.
            EntityNotFoundError: If either creator is unknown.
            PartialConsistencyError: If the source could not be deleted after rewriting.
        """
        self._reject_self_merge("creator", source_id, target_id)
        source = self._store.get_creator(source_id)
        target = self._store.get_creator(target_id)
        logger.info(f"Merging creator '{source.name}' into '{target.name}'")

        try:
            await self._store.update_atoms_matching(
                {"creator_name": source.name}, {"creator_name": target.name}
            )
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Creator merge {source_id} -> {target_id} failed rewriting atoms: {e}"
            ) from e

        try:
            await self._store.delete_creator(source_id)
        except RemoteError as e:
            raise PartialConsistencyError(
                f"Creator merge {source_id} -> {target_id} failed deleting the source: {e}",
                ["rewrote creator names"],
            ) from e

    def _reject_self_merge(self, kind: str, source_id: int, target_id: int) -> None:
        if source_id == target_id:
            raise ValidationError(f"Cannot merge {kind} {source_id} into itself")
