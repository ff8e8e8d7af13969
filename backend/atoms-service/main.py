import logging
from contextlib import asynccontextmanager

from application.rest.routers import (
    router_atoms,
    router_categories,
    router_creators,
    router_health,
    router_relationships,
    router_settings,
    router_tags,
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from utils.dependencies import (
    build_collection_store,
    build_gallery_view,
    build_remote_store,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared collection store and load every collection.

    The store, and the gallery view over it, live on ``app.state`` for the
    lifetime of the process.
    """
    remote_store = build_remote_store()
    store = build_collection_store(remote_store)
    await store.initialize()
    app.state.collection_store = store
    app.state.gallery_view = build_gallery_view(store)
    logger.info("Atoms service started")
    try:
        yield
    finally:
        aclose = getattr(remote_store, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.info("Atoms service stopped")


# FastAPI app
app = FastAPI(
    title="Atoms Service",
    description="Atom catalog service: atoms, tags, categories, creators and ideas",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Content-Type"],
)

app.include_router(router_health.router, tags=["health"])
app.include_router(router_atoms.router, tags=["atoms"])
app.include_router(router_relationships.router, tags=["atom-relationships"])
app.include_router(router_tags.router, tags=["tags"])
app.include_router(router_categories.router, tags=["categories"])
app.include_router(router_creators.router, tags=["creators"])
app.include_router(router_settings.router, tags=["settings"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8002)
