"""Remote store interface.

This module defines the abstract interface of the generic relational store
that holds every collection of the catalog, following the Repository
pattern from DDD.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence


class Collections:
    """Names of the remote collections."""

    ATOMS = "atoms"
    TAGS = "tags"
    CATEGORIES = "categories"
    CREATORS = "creators"
    CATEGORY_TAGS = "category_tags"
    CREATOR_TAGS = "creator_tags"
    ATOM_CREATORS = "atom_creators"
    ATOM_RELATIONSHIPS = "atom_relationships"
    SETTINGS = "settings"

    ALL = (
        ATOMS,
        TAGS,
        CATEGORIES,
        CREATORS,
        CATEGORY_TAGS,
        CREATOR_TAGS,
        ATOM_CREATORS,
        ATOM_RELATIONSHIPS,
        SETTINGS,
    )


@dataclass(frozen=True)
class OrderBy:
    """Single ordering parameter of a select.

    Attributes:
        column (str): Column to order by.
        ascending (bool): Sort direction.
    """

    column: str
    ascending: bool = True


Row = Dict[str, Any]


class RemoteStoreInterface(ABC):
    """Abstract interface for remote store operations.

    Every method is a single request/response round-trip. Implementations
    raise ``RemoteError`` when the call fails; they never return partial
    results for a failed call.

    Filters are equality matches on columns. ``contains`` restricts rows to
    those whose array column contains every given value.
    """

    @abstractmethod
    async def select(
        self,
        collection: str,
        columns: Sequence[str] = ("*",),
        filters: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, Sequence[Any]]] = None,
        order: Optional[OrderBy] = None,
    ) -> List[Row]:
        """Read rows from a collection.

        Args:
            collection (str): Collection name, see ``Collections``.
            columns (Sequence[str]): Columns to return, ``("*",)`` for all.
            filters (Optional[Mapping[str, Any]]): Column equality filters.
            contains (Optional[Mapping[str, Sequence[Any]]]): Array containment filters.
            order (Optional[OrderBy]): Ordering of the result.

        Returns:
            List[Row]: Matching rows.

        Example:
            >>> rows = await store.select("tags", order=OrderBy("count", ascending=False))
        """
        pass

    @abstractmethod
    async def insert(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        """Insert rows and return them as stored (with generated ids)."""
        pass

    @abstractmethod
    async def update(
        self, collection: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> None:
        """Apply ``patch`` to every row matching ``filters``."""
        pass

    @abstractmethod
    async def delete(self, collection: str, filters: Mapping[str, Any]) -> None:
        """Delete every row matching ``filters``."""
        pass

    @abstractmethod
    async def upsert(
        self, collection: str, row: Mapping[str, Any], conflict_key: str
    ) -> None:
        """Insert ``row`` or update the row sharing its ``conflict_key`` value."""
        pass
