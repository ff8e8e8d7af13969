"""PostgREST implementation of the remote store.

This module talks to a PostgREST endpoint (e.g. a hosted Postgres exposing
``/rest/v1``) over HTTP with httpx. Each store method is exactly one HTTP
request.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from domain.errors import RemoteError
from domain.repositories.remote_store import OrderBy, RemoteStoreInterface, Row

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _quote_array_item(value: Any) -> str:
    # Postgres array literals only treat backslash and double quote specially.
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _format_array(values: Sequence[Any]) -> str:
    # PostgREST array literal: {"a","b"}
    return "cs.{" + ",".join(_quote_array_item(v) for v in values) + "}"


class PostgrestRemoteStore(RemoteStoreInterface):
    """Remote store backed by a PostgREST HTTP API.

    Attributes:
        _client (httpx.AsyncClient): Client configured with base URL and auth headers.

    Example:
        >>> async with httpx.AsyncClient(base_url="https://db.example.com/rest/v1") as client:
        ...     store = PostgrestRemoteStore(client)
        ...     tags = await store.select("tags", order=OrderBy("count", ascending=False))
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(
        cls, base_url: str, api_key: str, timeout: float = 30.0
    ) -> "PostgrestRemoteStore":
        """Build a store with its own client from connection settings."""
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        client = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def select(
        self,
        collection: str,
        columns: Sequence[str] = ("*",),
        filters: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, Sequence[Any]]] = None,
        order: Optional[OrderBy] = None,
    ) -> List[Row]:
        params = self._filter_params(filters)
        params["select"] = ",".join(columns)
        for column, values in (contains or {}).items():
            params[column] = _format_array(values)
        if order is not None:
            direction = "asc" if order.ascending else "desc"
            params["order"] = f"{order.column}.{direction}"
        response = await self._request("GET", collection, "select", params=params)
        return response.json() or []

    async def insert(
        self, collection: str, rows: Sequence[Mapping[str, Any]]
    ) -> List[Row]:
        response = await self._request(
            "POST",
            collection,
            "insert",
            json=[dict(row) for row in rows],
            headers={"Prefer": "return=representation"},
        )
        return response.json() or []

    async def update(
        self, collection: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> None:
        self._require_filters(collection, "update", filters)
        await self._request(
            "PATCH",
            collection,
            "update",
            params=self._filter_params(filters),
            json=dict(patch),
            headers={"Prefer": "return=minimal"},
        )

    async def delete(self, collection: str, filters: Mapping[str, Any]) -> None:
        self._require_filters(collection, "delete", filters)
        await self._request(
            "DELETE", collection, "delete", params=self._filter_params(filters)
        )

    async def upsert(
        self, collection: str, row: Mapping[str, Any], conflict_key: str
    ) -> None:
        await self._request(
            "POST",
            collection,
            "upsert",
            params={"on_conflict": conflict_key},
            json=[dict(row)],
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def _request(
        self, method: str, collection: str, operation: str, **kwargs
    ) -> httpx.Response:
        """Send one request and translate failures into ``RemoteError``."""
        try:
            response = await self._client.request(method, f"/{collection}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{operation} on {collection} failed: {e}")
            raise RemoteError(str(e), collection, operation) from e

        if response.is_error:
            message = self._error_message(response)
            logger.error(
                f"{operation} on {collection} failed with {response.status_code}: {message}"
            )
            raise RemoteError(message, collection, operation)
        return response

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or str(body)
        return str(body)

    def _filter_params(self, filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        return {column: _format_value(value) for column, value in (filters or {}).items()}

    def _require_filters(
        self, collection: str, operation: str, filters: Mapping[str, Any]
    ) -> None:
        if not filters:
            raise RemoteError(
                f"{operation} on {collection} requires at least one filter",
                collection,
                operation,
            )
