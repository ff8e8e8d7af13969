"""SQLAlchemy implementation of the remote store.

This module contains the concrete implementation of RemoteStoreInterface
using SQLAlchemy Core statements against the tables registered on the
shared declarative ``Base``.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

from domain.errors import RemoteError
from domain.repositories.remote_store import OrderBy, RemoteStoreInterface, Row
from sqlalchemy import Table, and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# Imported for their side effect of registering tables on Base.metadata
from infrastructure.models import associations  # noqa: F401
from infrastructure.models.atom_orm import AtomORM  # noqa: F401
from infrastructure.models.base import Base
from infrastructure.models.tag_orm import TagORM  # noqa: F401
from infrastructure.models.taxonomy_orm import (  # noqa: F401
    CategoryORM,
    CreatorORM,
    SettingORM,
)

logger = logging.getLogger(__name__)


class SqlAlchemyRemoteStore(RemoteStoreInterface):
    """SQLAlchemy implementation of the remote store.

    NOTE: This store does not keep a session around. Each call opens a fresh
    session from the factory, commits it and closes it, so every method is
    one self-contained round-trip.

    Example:
        >>> store = SqlAlchemyRemoteStore(SessionLocal)
        >>> rows = await store.select("tags")
        >>> print(len(rows))
        5
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        """Initialize the store with a session factory.

        Args:
            session_factory (Callable[[], Session]): e.g. a configured ``sessionmaker``.
        """
        self._session_factory = session_factory

    async def select(
        self,
        collection: str,
        columns: Sequence[str] = ("*",),
        filters: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, Sequence[Any]]] = None,
        order: Optional[OrderBy] = None,
    ) -> List[Row]:
        """Read rows from a table.

        Array containment is evaluated after the query, since array columns
        are stored as portable JSON.
        """
        table = self._table(collection, "select")
        try:
            statement = select(table).where(*self._conditions(table, filters))
            if order is not None:
                column = table.c[order.column]
                statement = statement.order_by(
                    column.asc() if order.ascending else column.desc()
                )
            with self._session_factory() as session:
                rows = [dict(row._mapping) for row in session.execute(statement)]
        except (SQLAlchemyError, KeyError) as e:
            logger.error(f"Select on {collection} failed: {e}")
            raise RemoteError(str(e), collection, "select") from e

        for column, values in (contains or {}).items():
            rows = [
                row for row in rows if all(v in (row.get(column) or []) for v in values)
            ]
        if "*" not in columns:
            rows = [{name: row.get(name) for name in columns} for row in rows]
        return rows

    async def insert(
        self, collection: str, rows: Sequence[Mapping[str, Any]]
    ) -> List[Row]:
        """Insert rows in one transaction and return them as stored."""
        table = self._table(collection, "insert")
        primary_key = list(table.primary_key.columns)[0]
        try:
            with self._session_factory() as session:
                keys = []
                for row in rows:
                    result = session.execute(insert(table).values(**dict(row)))
                    keys.append(result.inserted_primary_key[0])
                session.commit()
                stored = [
                    dict(
                        session.execute(
                            select(table).where(primary_key == key)
                        ).one()._mapping
                    )
                    for key in keys
                ]
        except SQLAlchemyError as e:
            logger.error(f"Insert into {collection} failed: {e}")
            raise RemoteError(str(e), collection, "insert") from e
        return stored

    async def update(
        self, collection: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> None:
        """Apply ``patch`` to every matching row."""
        table = self._table(collection, "update")
        self._require_filters(collection, "update", filters)
        try:
            with self._session_factory() as session:
                session.execute(
                    update(table)
                    .where(and_(*self._conditions(table, filters)))
                    .values(**dict(patch))
                )
                session.commit()
        except (SQLAlchemyError, KeyError) as e:
            logger.error(f"Update on {collection} failed: {e}")
            raise RemoteError(str(e), collection, "update") from e

    async def delete(self, collection: str, filters: Mapping[str, Any]) -> None:
        """Delete every matching row."""
        table = self._table(collection, "delete")
        self._require_filters(collection, "delete", filters)
        try:
            with self._session_factory() as session:
                session.execute(
                    delete(table).where(and_(*self._conditions(table, filters)))
                )
                session.commit()
        except (SQLAlchemyError, KeyError) as e:
            logger.error(f"Delete on {collection} failed: {e}")
            raise RemoteError(str(e), collection, "delete") from e

    async def upsert(
        self, collection: str, row: Mapping[str, Any], conflict_key: str
    ) -> None:
        """Insert ``row`` or update the row with the same ``conflict_key`` value."""
        table = self._table(collection, "upsert")
        values = dict(row)
        if conflict_key not in values:
            raise RemoteError(
                f"Upsert row is missing conflict key '{conflict_key}'",
                collection,
                "upsert",
            )
        try:
            with self._session_factory() as session:
                key_column = table.c[conflict_key]
                existing = session.execute(
                    select(key_column).where(key_column == values[conflict_key])
                ).first()
                if existing:
                    session.execute(
                        update(table)
                        .where(key_column == values[conflict_key])
                        .values(**values)
                    )
                else:
                    session.execute(insert(table).values(**values))
                session.commit()
        except (SQLAlchemyError, KeyError) as e:
            logger.error(f"Upsert on {collection} failed: {e}")
            raise RemoteError(str(e), collection, "upsert") from e

    def _table(self, collection: str, operation: str) -> Table:
        table = Base.metadata.tables.get(collection)
        if table is None:
            raise RemoteError(f"Unknown collection '{collection}'", collection, operation)
        return table

    def _conditions(self, table: Table, filters: Optional[Mapping[str, Any]]) -> List:
        return [table.c[column] == value for column, value in (filters or {}).items()]

    def _require_filters(
        self, collection: str, operation: str, filters: Mapping[str, Any]
    ) -> None:
        # Unfiltered writes would touch the whole table.
        if not filters:
            raise RemoteError(
                f"{operation} on {collection} requires at least one filter",
                collection,
                operation,
            )


def create_tables(engine) -> None:
    """Create every catalog table that does not exist yet."""
    Base.metadata.create_all(bind=engine)