"""Remote store and service dependencies for the Atoms Service.

This module provides the factories that wire the configured remote store
into the collection store, and the dependency injection functions FastAPI
routers use to reach the shared instances.

Functions:
    - build_remote_store: Remote store for the configured backend
    - build_collection_store: Collection store around a remote store
    - get_collection_store: Shared collection store of the running app
    - get_merge_service: Merge service bound to the shared store

Architecture:
    The collection store is created once at startup and kept on
    ``app.state``; routers never build their own.
"""

import logging

from domain.repositories.remote_store import RemoteStoreInterface
from domain.services.collection_store import CollectionStore
from domain.services.filter_service import GalleryView
from domain.services.relationship_service import MergeService
from fastapi import Depends, Request
from infrastructure.repositories.postgrest_remote_store import PostgrestRemoteStore
from infrastructure.repositories.sqlalchemy_remote_store import (
    SqlAlchemyRemoteStore,
    create_tables,
)
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import (
    CONNECTION_RETRIES,
    CONNECTION_RETRY_BASE_DELAY,
    DATABASE_URL,
    INITIAL_PAGE_SIZE,
    LOG_LEVEL,
    PAGE_SIZE_INCREMENT,
    POSTGREST_API_KEY,
    POSTGREST_URL,
    REMOTE_STORE_BACKEND,
    REMOTE_TIMEOUT_SECONDS,
)

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL))
logger = logging.getLogger(__name__)


def build_remote_store(backend: str = REMOTE_STORE_BACKEND) -> RemoteStoreInterface:
    """Create the remote store for the configured backend.

    For the sqlalchemy backend the tables are created if they are missing.

    Args:
        backend (str): "sqlalchemy" or "postgrest".

    Returns:
        RemoteStoreInterface: Ready-to-use remote store.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if backend == "postgrest":
        logger.info(f"Using PostgREST remote store at {POSTGREST_URL}")
        return PostgrestRemoteStore.from_settings(
            POSTGREST_URL, POSTGREST_API_KEY, REMOTE_TIMEOUT_SECONDS
        )
    if backend == "sqlalchemy":
        connect_args = (
            {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
        )
        engine = create_engine(DATABASE_URL, connect_args=connect_args)
        create_tables(engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Using SQLAlchemy remote store")
        return SqlAlchemyRemoteStore(SessionLocal)
    raise ValueError(f"Unknown remote store backend: {backend}")


def build_collection_store(remote_store: RemoteStoreInterface) -> CollectionStore:
    """Create the collection store with the configured retry policy."""
    return CollectionStore(
        remote_store,
        connection_retries=CONNECTION_RETRIES,
        retry_base_delay=CONNECTION_RETRY_BASE_DELAY,
    )


def build_gallery_view(store: CollectionStore) -> GalleryView:
    return GalleryView(store, INITIAL_PAGE_SIZE, PAGE_SIZE_INCREMENT)


def get_collection_store(request: Request) -> CollectionStore:
    """Return the collection store created at application startup.

    Args:
        request (Request): FastAPI request object.

    Returns:
        CollectionStore: Shared store of the running application.
    """
    return request.app.state.collection_store


def get_merge_service(
    store: CollectionStore = Depends(get_collection_store),
) -> MergeService:
    """Create the merge service around the shared collection store."""
    return MergeService(store)
