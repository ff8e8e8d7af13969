"""Tests for the HTTP routes through the ASGI app."""

import httpx
import pytest
import pytest_asyncio

from main import app
from utils.dependencies import get_collection_store

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(seeded_store):
    """Async HTTP client against the ASGI app, bound to the seeded store."""
    app.dependency_overrides[get_collection_store] = lambda: seeded_store
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()


def atom_ids(response):
    return [atom["id"] for atom in response.json()["atoms"]]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "atoms-service"}


class TestAtomRoutes:
    async def test_add_atom_applies_defaults(self, client, seeded_store):
        response = await client.post(
            "/atoms",
            json={"media_source_link": "https://img.example.com/a.png", "tags": [" Sky "]},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["atom"]["title"] == "Untitled"
        assert body["atom"]["content_type"] == "image"
        assert body["atom"]["tags"] == ["sky"]
        assert seeded_store.atoms[-1].id == body["atom"]["id"]

    async def test_ideas_are_tagged_with_their_title(self, client, seeded_store):
        response = await client.post(
            "/atoms",
            json={
                "title": "Mood  Board",
                "content_type": "idea",
                "media_source_link": "idea://mood-board",
                "tags": ["Sky"],
            },
        )
        assert response.status_code == 201
        assert response.json()["atom"]["tags"] == ["sky", "mood board"]
        assert seeded_store.find_tag_by_name("mood board") is not None

    async def test_media_source_link_is_required(self, client):
        response = await client.post("/atoms", json={"title": "No media"})
        assert response.status_code == 422

    async def test_creators_are_linked(self, client, remote_store):
        response = await client.post(
            "/atoms",
            json={"media_source_link": "https://x/y.png", "creator_name": "Ann Lee, Cy Dee"},
        )
        atom_id = response.json()["atom"]["id"]
        links = await remote_store.select("atom_creators", filters={"atom_id": atom_id})
        assert len(links) == 2

    async def test_gallery_filters_and_pages(self, client):
        response = await client.get("/atoms")
        assert atom_ids(response) == [3, 1]

        assert atom_ids(await client.get("/atoms", params={"tags": "secret"})) == [2]
        assert atom_ids(await client.get("/atoms", params={"q": "sunset"})) == [1]
        assert atom_ids(await client.get("/atoms", params={"content_types": "video"})) == [3]

        paged = await client.get("/atoms", params={"limit": 1, "page": 2})
        assert atom_ids(paged) == [1]
        assert paged.json()["pagination"] == {
            "current_page": 2,
            "total_pages": 2,
            "total_atoms": 2,
            "atoms_per_page": 1,
            "has_next": False,
            "has_previous": True,
        }

    async def test_gallery_idea_scope(self, client):
        await client.post("/atom-relationships", json={"parentAtomId": 3, "childAtomId": 1})
        response = await client.get("/atoms", params={"idea_id": 3})
        assert atom_ids(response) == [1]

    async def test_patch_atom(self, client, seeded_store):
        response = await client.patch("/atoms/1", json={"tags": ["Sea"], "hidden": True})
        assert response.status_code == 200
        assert response.json()["tags"] == ["sea"]
        assert seeded_store.get_atom(1).hidden is True

    async def test_patch_errors(self, client):
        assert (await client.patch("/atoms/99", json={"title": "x"})).status_code == 404
        assert (await client.patch("/atoms/1", json={})).status_code == 400

    async def test_delete_atom(self, client, seeded_store):
        response = await client.delete("/atoms/1")
        assert response.status_code == 204
        assert 1 not in [atom.id for atom in seeded_store.atoms]

    async def test_failed_delete_is_a_bad_gateway(self, client, flaky, seeded_store):
        flaky.fail("atoms", "delete")
        response = await client.delete("/atoms/1")
        assert response.status_code == 502
        assert 1 in seeded_store.deleting_ids


class TestRelationshipRoutes:
    async def test_relationship_is_idempotent(self, client):
        body = {"parentAtomId": 10, "childAtomId": 11}
        first = await client.post("/atom-relationships", json=body)
        second = await client.post("/atom-relationships", json=body)
        assert first.json()["success"] is True
        assert second.json()["message"] == "Relationship already exists"

        children = await client.get("/atom-relationships/10")
        assert children.json() == {"parent_atom_id": 10, "child_atom_ids": [11]}

    async def test_atom_cannot_be_its_own_child(self, client):
        response = await client.post(
            "/atom-relationships", json={"parentAtomId": 10, "childAtomId": 10}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot add atom to itself"


class TestTagRoutes:
    async def test_list_tags(self, client):
        response = await client.get("/tags")
        assert [tag["name"] for tag in response.json()["tags"]] == ["sky", "forest", "secret"]

    async def test_create_tag_normalizes_and_is_idempotent(self, client):
        created = await client.post("/tags", json={"name": " Street  Art "})
        again = await client.post("/tags", json={"name": "street art"})
        assert created.status_code == 201
        assert created.json()["name"] == "street art"
        assert again.json()["id"] == created.json()["id"]

    async def test_rename_collision_is_rejected(self, client):
        response = await client.put("/tags/2", json={"name": "SKY"})
        assert response.status_code == 400

    async def test_merge_tags(self, client, seeded_store):
        response = await client.post("/tags/merge", json={"source_id": 2, "target_id": 1})
        assert response.status_code == 200
        assert sorted(response.json()["rewritten_atom_ids"]) == [2, 3]
        assert "forest" not in [tag.name for tag in seeded_store.tags]

    async def test_merge_errors(self, client, flaky):
        same = await client.post("/tags/merge", json={"source_id": 1, "target_id": 1})
        assert same.status_code == 400
        unknown = await client.post("/tags/merge", json={"source_id": 99, "target_id": 1})
        assert unknown.status_code == 404

        flaky.fail("atoms", "update", after=1)
        partial = await client.post("/tags/merge", json={"source_id": 2, "target_id": 1})
        assert partial.status_code == 409

    async def test_delete_unknown_tag(self, client):
        assert (await client.delete("/tags/99")).status_code == 404


class TestCategoryRoutes:
    async def test_assign_and_list_category_tags(self, client):
        response = await client.post("/categories/2/tags/1")
        assert response.status_code == 201
        assert [tag["name"] for tag in response.json()] == ["secret", "sky"]

        listed = await client.get("/categories/1/tags")
        assert [tag["name"] for tag in listed.json()] == ["sky", "forest"]

        removed = await client.delete("/categories/2/tags/1")
        assert removed.status_code == 204

    async def test_create_update_and_delete(self, client):
        created = await client.post("/categories", json={"name": "Food"})
        category_id = created.json()["id"]
        updated = await client.put(f"/categories/{category_id}", json={"is_private": True})
        assert updated.json()["is_private"] is True
        assert (await client.delete(f"/categories/{category_id}")).status_code == 204
        assert (await client.delete(f"/categories/{category_id}")).status_code == 404

    async def test_merge_categories(self, client, seeded_store):
        response = await client.post("/categories/merge", json={"source_id": 2, "target_id": 1})
        assert response.status_code == 200
        assert [c.name for c in seeded_store.categories] == ["Nature"]


class TestCreatorAndSettingsRoutes:
    async def test_list_and_merge_creators(self, client, seeded_store):
        listed = await client.get("/creators")
        assert [c["name"] for c in listed.json()] == ["Ann Lee", "Bo Chen"]

        merged = await client.post("/creators/merge", json={"source_id": 2, "target_id": 1})
        assert merged.status_code == 200
        assert seeded_store.get_atom(2).creator_name == "Ann Lee"

    async def test_creator_tags_and_favorites(self, client):
        assigned = await client.post("/creators/1/tags/2")
        assert [tag["name"] for tag in assigned.json()] == ["forest"]
        assert [t["name"] for t in (await client.get("/creators/1/tags")).json()] == ["forest"]

        favorite = await client.post("/creators/1/favorite")
        assert favorite.json()["data"] == {"favorite_creators": ["Ann Lee"]}

    async def test_default_category(self, client):
        assert (await client.get("/settings/default-category")).json() == {"category_id": None}

        response = await client.put("/settings/default-category", json={"category_id": 1})
        assert response.json() == {"category_id": 1}
        assert atom_ids(await client.get("/atoms")) == [3, 1]

        unknown = await client.put("/settings/default-category", json={"category_id": 99})
        assert unknown.status_code == 404

        cleared = await client.put("/settings/default-category", json={"category_id": None})
        assert cleared.json() == {"category_id": None}
