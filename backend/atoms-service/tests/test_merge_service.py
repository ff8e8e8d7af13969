"""Tests for the derived tag lookups and the MergeService."""

import pytest

from domain.entities.relationships import CategoryTag
from domain.entities.tag import Tag
from domain.errors import EntityNotFoundError, PartialConsistencyError, ValidationError
from domain.services.normalization import normalize_tags
from domain.services.relationship_service import (
    MergeService,
    build_category_tag_lookup,
)


def test_lookup_deduplicates_and_skips_unknown_tags():
    tags = [Tag(id=1, name="sky"), Tag(id=2, name="sea")]
    rows = [
        CategoryTag(id=1, category_id=7, tag_id=2),
        CategoryTag(id=2, category_id=7, tag_id=1),
        CategoryTag(id=3, category_id=7, tag_id=2),
        CategoryTag(id=4, category_id=7, tag_id=99),
        CategoryTag(id=5, category_id=8, tag_id=1),
    ]
    lookup = build_category_tag_lookup(rows, tags)
    assert [t.name for t in lookup[7]] == ["sea", "sky"]
    assert [t.name for t in lookup[8]] == ["sky"]


@pytest.mark.asyncio
class TestMergeTag:
    async def test_merge_rewrites_atoms_and_repoints_join_rows(
        self, remote_store, seeded_store
    ):
        rewritten = await MergeService(seeded_store).merge_tag(source_id=2, target_id=1)

        assert sorted(rewritten) == [2, 3]
        assert seeded_store.get_atom(2).tags == ["secret", "sky"]
        assert seeded_store.get_atom(3).tags == ["sky"]
        assert await remote_store.select("atoms", contains={"tags": ["forest"]}) == []
        assert len(await remote_store.select("atoms")) == 3
        assert [t.name for t in seeded_store.get_category_tags(1)] == ["sky"]
        with pytest.raises(EntityNotFoundError):
            seeded_store.get_tag(2)

    async def test_merge_matches_unnormalized_stored_tags(self, remote_store, seeded_store):
        rewritten = await MergeService(seeded_store).merge_tag(source_id=1, target_id=2)

        assert rewritten == [1]
        assert seeded_store.get_atom(1).tags == ["forest"]
        remote_tags = [row["tags"] for row in await remote_store.select("atoms")]
        assert all("sky" not in normalize_tags(tags) for tags in remote_tags)
        assert seeded_store.find_tag_by_name("sky") is None

    async def test_merge_deduplicates_when_atom_has_both_tags(self, seeded_store):
        await seeded_store.update_atom(2, {"tags": ["forest", "sky"]})
        await MergeService(seeded_store).merge_tag(source_id=2, target_id=1)
        assert seeded_store.get_atom(2).tags == ["sky"]

    async def test_failed_merge_keeps_source_and_can_be_rerun(
        self, flaky, remote_store, seeded_store
    ):
        merges = MergeService(seeded_store)
        flaky.fail("atoms", "update", after=1)
        with pytest.raises(PartialConsistencyError) as excinfo:
            await merges.merge_tag(source_id=2, target_id=1)
        assert len(excinfo.value.completed) == 1
        assert seeded_store.get_tag(2).name == "forest"
        assert await remote_store.select("tags", filters={"id": 2})

        flaky.heal()
        await merges.merge_tag(source_id=2, target_id=1)
        assert await remote_store.select("atoms", contains={"tags": ["forest"]}) == []
        assert await remote_store.select("tags", filters={"id": 2}) == []

    async def test_merge_into_itself_is_rejected(self, seeded_store):
        with pytest.raises(ValidationError):
            await MergeService(seeded_store).merge_tag(1, 1)

    async def test_unknown_tag_is_rejected(self, seeded_store):
        with pytest.raises(EntityNotFoundError):
            await MergeService(seeded_store).merge_tag(99, 1)


@pytest.mark.asyncio
class TestMergeCategory:
    async def test_tags_move_to_target_and_source_is_deleted(self, seeded_store):
        await MergeService(seeded_store).merge_category(source_id=2, target_id=1)
        assert [t.name for t in seeded_store.get_category_tags(1)] == [
            "sky",
            "forest",
            "secret",
        ]
        with pytest.raises(EntityNotFoundError):
            seeded_store.get_category(2)

    async def test_merging_the_default_category_clears_it(self, seeded_store):
        await seeded_store.set_default_category(2)
        await MergeService(seeded_store).merge_category(source_id=2, target_id=1)
        assert seeded_store.default_category_id is None

    async def test_failed_delete_reports_repointed_tags(self, flaky, seeded_store):
        flaky.fail("categories", "delete")
        with pytest.raises(PartialConsistencyError) as excinfo:
            await MergeService(seeded_store).merge_category(source_id=2, target_id=1)
        assert excinfo.value.completed == ["repointed category tags"]
        assert seeded_store.get_category(2).name == "Private"


@pytest.mark.asyncio
class TestMergeCreator:
    async def test_only_exact_creator_names_are_rewritten(self, seeded_store):
        await MergeService(seeded_store).merge_creator(source_id=2, target_id=1)
        assert seeded_store.get_atom(2).creator_name == "Ann Lee"
        assert seeded_store.get_atom(3).creator_name == "Ann Lee, Bo Chen"
        with pytest.raises(EntityNotFoundError):
            seeded_store.get_creator(2)

    async def test_merge_into_itself_is_rejected(self, seeded_store):
        with pytest.raises(ValidationError):
            await MergeService(seeded_store).merge_creator(2, 2)
