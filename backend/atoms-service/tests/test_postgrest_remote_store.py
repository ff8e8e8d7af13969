"""Tests for the PostgREST remote store using httpx.MockTransport."""

import json

import httpx
import pytest

from domain.errors import RemoteError
from domain.repositories.remote_store import OrderBy
from infrastructure.repositories.postgrest_remote_store import PostgrestRemoteStore

pytestmark = pytest.mark.asyncio


class Recorder:
    """Request handler that records requests and replies with a fixed response."""

    def __init__(self, status_code=200, body=None):
        self.requests = []
        self.status_code = status_code
        self.body = body

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)


async def test_select_builds_postgrest_query(mock_client_factory):
    handler = Recorder(body=[{"id": 3, "tags": ["sky"]}])
    store = PostgrestRemoteStore(mock_client_factory(handler))

    rows = await store.select(
        "atoms",
        filters={"hidden": False, "creator_name": None, "id": 3},
        contains={"tags": ["sky", "street art"]},
        order=OrderBy("created_at", ascending=False),
    )

    assert rows == [{"id": 3, "tags": ["sky"]}]
    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/atoms"
    params = request.url.params
    assert params["select"] == "*"
    assert params["hidden"] == "eq.false"
    assert params["creator_name"] == "is.null"
    assert params["id"] == "eq.3"
    assert params["tags"] == 'cs.{"sky","street art"}'
    assert params["order"] == "created_at.desc"


async def test_array_literal_keeps_non_ascii_and_escapes_quotes(mock_client_factory):
    handler = Recorder(body=[])
    store = PostgrestRemoteStore(mock_client_factory(handler))

    await store.select("atoms", contains={"tags": ["café", 'say "hi"', "a\\b"]})

    params = handler.requests[0].url.params
    assert params["tags"] == 'cs.{"café","say \\"hi\\"","a\\\\b"}'


async def test_insert_asks_for_the_stored_rows(mock_client_factory):
    handler = Recorder(status_code=201, body=[{"id": 7, "name": "sky"}])
    store = PostgrestRemoteStore(mock_client_factory(handler))

    rows = await store.insert("tags", [{"name": "sky"}])

    assert rows == [{"id": 7, "name": "sky"}]
    request = handler.requests[0]
    assert request.method == "POST"
    assert request.headers["Prefer"] == "return=representation"
    assert json.loads(request.content) == [{"name": "sky"}]


async def test_update_and_delete_send_filters(mock_client_factory):
    handler = Recorder(status_code=204)
    store = PostgrestRemoteStore(mock_client_factory(handler))

    await store.update("atoms", {"hidden": True}, {"id": 4})
    await store.delete("category_tags", {"category_id": 1, "tag_id": 2})

    update, delete = handler.requests
    assert update.method == "PATCH"
    assert update.url.params["id"] == "eq.4"
    assert json.loads(update.content) == {"hidden": True}
    assert delete.method == "DELETE"
    assert delete.url.params["category_id"] == "eq.1"
    assert delete.url.params["tag_id"] == "eq.2"


async def test_unfiltered_writes_are_refused_without_a_request(mock_client_factory):
    handler = Recorder()
    store = PostgrestRemoteStore(mock_client_factory(handler))

    with pytest.raises(RemoteError):
        await store.update("atoms", {"hidden": True}, {})
    with pytest.raises(RemoteError):
        await store.delete("atoms", {})
    assert handler.requests == []


async def test_upsert_merges_on_conflict_key(mock_client_factory):
    handler = Recorder(status_code=201)
    store = PostgrestRemoteStore(mock_client_factory(handler))

    await store.upsert(
        "settings",
        {"key": "default_category", "value": {"categoryId": 3}},
        conflict_key="key",
    )

    request = handler.requests[0]
    assert request.url.params["on_conflict"] == "key"
    assert request.headers["Prefer"] == "resolution=merge-duplicates,return=minimal"
    assert json.loads(request.content) == [
        {"key": "default_category", "value": {"categoryId": 3}}
    ]


async def test_error_response_becomes_remote_error(mock_client_factory):
    handler = Recorder(status_code=409, body={"message": "duplicate key value"})
    store = PostgrestRemoteStore(mock_client_factory(handler))

    with pytest.raises(RemoteError) as excinfo:
        await store.insert("tags", [{"name": "sky"}])

    assert str(excinfo.value) == "duplicate key value"
    assert excinfo.value.collection == "tags"
    assert excinfo.value.operation == "insert"


async def test_transport_error_becomes_remote_error(mock_client_factory):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    store = PostgrestRemoteStore(mock_client_factory(handler))

    with pytest.raises(RemoteError) as excinfo:
        await store.select("atoms")
    assert excinfo.value.operation == "select"


async def test_from_settings_sets_auth_headers():
    store = PostgrestRemoteStore.from_settings(
        "https://db.example.com/rest/v1", "anon-key", timeout=5
    )
    try:
        headers = store._client.headers
        assert headers["apikey"] == "anon-key"
        assert headers["Authorization"] == "Bearer anon-key"
    finally:
        await store.aclose()
