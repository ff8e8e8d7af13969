"""Tests for the domain entities."""

from datetime import datetime, timezone

import pytest

from domain.entities.atom import Atom
from domain.entities.category import Category
from domain.entities.filters import FilterCriteria, PaginationMetadata, RevealWindow
from domain.entities.relationships import AtomRelationship, CategoryTag
from domain.entities.tag import Tag, is_pseudo_tag


class TestTag:
    def test_name_is_normalized(self):
        assert Tag(id=None, name="  Street   Art ").name == "street art"

    def test_empty_name_is_rejected(self):
        with pytest.raises(ValueError):
            Tag(id=None, name="   ")

    def test_from_row_ignores_unknown_columns_and_fills_defaults(self):
        tag = Tag.from_row({"id": 4, "name": "Sky", "count": None, "extra": 1})
        assert (tag.id, tag.name, tag.count, tag.is_private) == (4, "sky", 0, False)
        assert not tag.is_new()

    def test_pseudo_tags(self):
        assert is_pseudo_tag("flagged")
        assert is_pseudo_tag("no-tag")
        assert not is_pseudo_tag("sky")


class TestAtom:
    def test_from_row_parses_iso_timestamps_and_null_columns(self):
        atom = Atom.from_row(
            {
                "id": 1,
                "title": "Sunset",
                "content_type": "image",
                "tags": None,
                "hidden": None,
                "created_at": "2024-01-01T12:00:00Z",
                "private_note": "dropped",
            }
        )
        assert atom.tags == []
        assert atom.hidden is False
        assert atom.created_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_with_updates_returns_patched_copy(self):
        atom = Atom(id=1, title="Sunset", content_type="image", tags=["sky"])
        patched = atom.with_updates({"title": "Dusk", "hidden": True})
        assert (patched.title, patched.hidden, patched.tags) == ("Dusk", True, ["sky"])
        assert atom.title == "Sunset"

    def test_writable_fields_exclude_server_owned_columns(self):
        fields = Atom.writable_fields()
        assert "id" not in fields
        assert "created_at" not in fields
        assert {"title", "tags", "hidden", "metadata"} <= fields

    def test_text_search_covers_title_description_and_tags(self):
        atom = Atom(
            id=1,
            title="Sunset",
            content_type="image",
            description="Over the bay",
            tags=["orange sky"],
        )
        assert atom.matches_text_search("SUN")
        assert atom.matches_text_search("bay")
        assert atom.matches_text_search("orange")
        assert not atom.matches_text_search("forest")
        assert atom.matches_text_search("  ")

    def test_creator_names_split_the_legacy_field(self):
        atom = Atom(id=1, title="x", content_type="image", creator_name="Ann Lee, Bo Chen")
        assert atom.creator_names() == ["Ann Lee", "Bo Chen"]


def test_category_requires_a_name():
    with pytest.raises(ValueError):
        Category(id=1, name=" ")


def test_category_tag_row_without_id():
    row = CategoryTag.from_row({"category_id": 1, "tag_id": 2})
    assert row.id is None


def test_atom_cannot_be_its_own_child():
    with pytest.raises(ValueError, match="Cannot add atom to itself"):
        AtomRelationship(parent_atom_id=10, child_atom_id=10)


class TestFilterCriteria:
    def test_selected_tags_are_normalized(self):
        criteria = FilterCriteria(selected_tags=frozenset({"Art ", "FLAGGED"}))
        assert criteria.selected_tags == frozenset({"art", "flagged"})
        assert criteria.real_tags == frozenset({"art"})

    def test_signature_ignores_set_order_and_search_case(self):
        first = FilterCriteria(search_term="Sky", selected_tags=frozenset({"a", "b"}))
        second = FilterCriteria(search_term=" sky ", selected_tags=frozenset({"b", "a"}))
        assert first.signature() == second.signature()

    def test_signature_changes_with_predicates(self):
        assert (
            FilterCriteria(idea_id=1).signature() != FilterCriteria(idea_id=2).signature()
        )


class TestRevealWindow:
    def test_grows_and_resets_on_new_signature(self):
        window = RevealWindow(initial_size=2, increment=3)
        assert window.sync("a") is True
        assert window.reveal_more() == 5
        assert window.sync("a") is False
        assert window.visible_count == 5
        assert window.sync("b") is True
        assert window.visible_count == 2

    def test_reveal_is_capped_by_total_but_never_shrinks(self):
        window = RevealWindow(initial_size=4, increment=4)
        assert window.reveal_more(total=6) == 6
        assert window.reveal_more(total=2) == 6

    def test_slice_and_has_more(self):
        window = RevealWindow(initial_size=2, increment=2)
        assert window.slice([1, 2, 3]) == [1, 2]
        assert window.has_more(3)
        assert not window.has_more(2)

    def test_rejects_empty_pages(self):
        with pytest.raises(ValueError):
            RevealWindow(initial_size=0)


def test_pagination_metadata():
    pagination = PaginationMetadata.calculate(current_page=2, total_atoms=47, atoms_per_page=10)
    assert pagination.total_pages == 5
    assert pagination.has_next and pagination.has_previous
    assert pagination.offset == 10
    assert PaginationMetadata.calculate(1, 0, 10).total_pages == 1
