"""Tests for the gallery filter and the GalleryView."""

import pytest

from domain.entities.atom import Atom
from domain.entities.filters import FilterCriteria
from domain.services.filter_service import (
    FilterContext,
    GalleryView,
    build_filter_context,
    filter_atoms,
    filter_signature,
)


def make_atom(atom_id, tags=(), **fields):
    fields.setdefault("title", f"Atom {atom_id}")
    fields.setdefault("content_type", "image")
    return Atom(id=atom_id, tags=list(tags), **fields)


def ids(atoms):
    return [atom.id for atom in atoms]


def select(*tags, **fields):
    return FilterCriteria(selected_tags=frozenset(tags), **fields)


class TestFilterAtoms:
    def test_differently_written_tags_match_the_same_selection(self):
        atoms = [make_atom(1, ["Art"]), make_atom(2, ["art "])]
        assert ids(filter_atoms(atoms, select("art"), FilterContext())) == [1, 2]

    def test_filtering_is_pure_and_keeps_input_order(self):
        atoms = [make_atom(3, ["b"]), make_atom(1, ["a", "b"]), make_atom(2, ["b"])]
        criteria = select("b")
        first = filter_atoms(atoms, criteria, FilterContext())
        second = filter_atoms(atoms, criteria, FilterContext())
        assert ids(first) == ids(second) == [3, 1, 2]
        assert ids(atoms) == [3, 1, 2]

    def test_duplicate_ids_are_dropped(self):
        atoms = [make_atom(1), make_atom(2), make_atom(1)]
        assert ids(filter_atoms(atoms, FilterCriteria(), FilterContext())) == [1, 2]

    def test_search_matches_title_description_and_tags(self):
        atoms = [
            make_atom(1, title="Golden hour"),
            make_atom(2, description="A golden retriever"),
            make_atom(3, ["golden gate"]),
            make_atom(4, ["bridge"]),
        ]
        criteria = FilterCriteria(search_term="GOLDEN")
        assert ids(filter_atoms(atoms, criteria, FilterContext())) == [1, 2, 3]

    def test_content_type_and_creator_filters(self):
        atoms = [
            make_atom(1, creator_name="Ann Lee, Bo Chen"),
            make_atom(2, content_type="video", creator_name="Bo Chen"),
            make_atom(3, creator_name="Cy Dee"),
        ]
        by_type = FilterCriteria(content_types=frozenset({"image"}))
        by_creator = FilterCriteria(creators=frozenset({"Bo Chen"}))
        assert ids(filter_atoms(atoms, by_type, FilterContext())) == [1, 3]
        assert ids(filter_atoms(atoms, by_creator, FilterContext())) == [1, 2]

    def test_favorites_only(self):
        atoms = [make_atom(1, creator_name="Ann Lee"), make_atom(2, creator_name="Bo Chen")]
        context = FilterContext(favorite_creators=frozenset({"Bo Chen"}))
        criteria = FilterCriteria(show_only_favorites=True)
        assert ids(filter_atoms(atoms, criteria, context)) == [2]

    def test_private_category_atoms_appear_once_one_of_its_tags_is_selected(self):
        atoms = [make_atom(1, ["secret", "forest"]), make_atom(2, ["forest"])]
        context = FilterContext(private_tag_names=frozenset({"secret"}))
        assert ids(filter_atoms(atoms, FilterCriteria(), context)) == [2]
        assert ids(filter_atoms(atoms, select("forest"), context)) == [2]
        assert ids(filter_atoms(atoms, select("secret"), context)) == [1]

    def test_default_category_scope_is_waived_by_any_selection(self):
        x = make_atom(1, ["t"])
        y = make_atom(2, ["other"])
        context = FilterContext(default_category_tag_names=frozenset({"t"}))
        assert ids(filter_atoms([x, y], FilterCriteria(), context)) == [1]
        assert ids(filter_atoms([x, y], select("flagged"), context)) == []
        both = [make_atom(1, ["t", "u"]), make_atom(2, ["other", "u"])]
        assert ids(filter_atoms(both, select("u"), context)) == [1, 2]

    def test_flagged_pseudo_tag(self):
        atoms = [make_atom(1, ["a"], flag_for_deletion=True), make_atom(2, ["a"])]
        assert ids(filter_atoms(atoms, select("flagged"), FilterContext())) == [1]
        assert ids(filter_atoms(atoms, select("flagged", "a"), FilterContext())) == [1]

    def test_no_tag_pseudo_tag(self):
        atoms = [make_atom(1), make_atom(2, ["a"])]
        assert ids(filter_atoms(atoms, select("no-tag"), FilterContext())) == [1]

    def test_real_tags_must_all_be_present(self):
        atoms = [make_atom(1, ["a", "b"]), make_atom(2, ["a"])]
        assert ids(filter_atoms(atoms, select("a", "b"), FilterContext())) == [1]

    def test_hidden_atoms_only_show_inside_their_idea(self):
        atoms = [make_atom(1, hidden=True), make_atom(2), make_atom(3, hidden=True)]
        assert ids(filter_atoms(atoms, FilterCriteria(), FilterContext())) == [2]
        in_idea = FilterCriteria(idea_id=9)
        context = FilterContext(idea_child_ids=frozenset({1, 2}))
        assert ids(filter_atoms(atoms, in_idea, context)) == [1, 2]

    def test_idea_scope_requires_loaded_children(self):
        with pytest.raises(ValueError):
            filter_atoms([make_atom(1)], FilterCriteria(idea_id=9), FilterContext())


@pytest.mark.asyncio
class TestStoreBackedFiltering:
    async def test_context_is_derived_from_store(self, seeded_store):
        await seeded_store.set_default_category(1)
        await seeded_store.toggle_favorite_creator("Ann Lee")
        context = build_filter_context(seeded_store)
        assert context.private_tag_names == frozenset({"secret"})
        assert context.default_category_tag_names == frozenset({"sky", "forest"})
        assert context.favorite_creators == frozenset({"Ann Lee"})
        assert context.idea_child_ids is None

    async def test_default_category_and_privacy_on_seeded_catalog(self, seeded_store):
        await seeded_store.set_default_category(1)
        visible = filter_atoms(
            seeded_store.atoms, FilterCriteria(), build_filter_context(seeded_store)
        )
        assert ids(visible) == [3, 1]


@pytest.mark.asyncio
class TestGalleryView:
    async def test_snapshot_reveals_and_resets_on_filter_change(self, seeded_store):
        view = GalleryView(seeded_store, initial_page_size=1, page_size_increment=1)
        snapshot = view.snapshot(view.criteria())
        assert ids(snapshot.atoms) == [3]
        assert (snapshot.total, snapshot.has_more, snapshot.pending) == (2, True, False)

        view.reveal_more()
        assert ids(view.snapshot(view.criteria()).atoms) == [3, 1]

        seeded_store.toggle_tag("forest")
        snapshot = view.snapshot(view.criteria())
        assert ids(snapshot.atoms) == [3]
        assert view.window.visible_count == 1

    async def test_selected_creator_narrows_the_gallery(self, seeded_store):
        view = GalleryView(seeded_store)
        seeded_store.set_selected_creator("Bo Chen")
        assert ids(view.snapshot(view.criteria()).atoms) == [3]

    async def test_pending_idea_holds_last_result(self, seeded_store):
        await seeded_store.add_child_atom(3, 1)
        view = GalleryView(seeded_store)
        before = view.snapshot(view.criteria())

        pending = view.snapshot(view.criteria(idea_id=3))
        assert pending.pending is True
        assert ids(pending.atoms) == ids(before.atoms)

        await view.load_idea_children(3)
        loaded = view.snapshot(view.criteria(idea_id=3))
        assert loaded.pending is False
        assert ids(loaded.atoms) == [1]

    async def test_signature_helper_matches_criteria(self, seeded_store):
        criteria = GalleryView(seeded_store).criteria(search_term="Sun")
        assert filter_signature(criteria) == criteria.signature()

    async def test_idea_scope_follows_relationship_writes(self, seeded_store):
        await seeded_store.add_child_atom(3, 1)
        view = GalleryView(seeded_store)
        await view.load_idea_children(3)
        assert ids(view.snapshot(view.criteria(idea_id=3)).atoms) == [1]

        dawn = await seeded_store.add_atom(
            {"title": "Dawn", "content_type": "image", "tags": ["sky"]}
        )
        await seeded_store.add_child_atom(3, dawn.id)
        assert ids(view.snapshot(view.criteria(idea_id=3)).atoms) == [1, dawn.id]

        await seeded_store.remove_child_atom(3, 1)
        assert ids(view.snapshot(view.criteria(idea_id=3)).atoms) == [dawn.id]

        view.forget_idea_children(3)
        assert view.snapshot(view.criteria(idea_id=3)).pending is True

    async def test_favorites_and_default_category_reset_the_window(self, seeded_store):
        view = GalleryView(seeded_store, initial_page_size=1, page_size_increment=1)
        view.snapshot(view.criteria())
        view.reveal_more()
        assert view.window.visible_count == 2

        await seeded_store.toggle_favorite_creator("Ann Lee")
        view.snapshot(view.criteria())
        assert view.window.visible_count == 1

        view.reveal_more()
        await seeded_store.set_default_category(1)
        view.snapshot(view.criteria())
        assert view.window.visible_count == 1

    async def test_signature_includes_store_scope(self, seeded_store):
        criteria = FilterCriteria()
        before = filter_signature(criteria, build_filter_context(seeded_store))
        await seeded_store.toggle_favorite_creator("Bo Chen")
        after = filter_signature(criteria, build_filter_context(seeded_store))
        assert before != after
