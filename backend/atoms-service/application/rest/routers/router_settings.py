from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.taxonomy_input import DefaultCategoryUpdate
from application.rest.schemas.output.taxonomy_output import DefaultCategoryResponse
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from fastapi import APIRouter, Depends, status
from utils.dependencies import get_collection_store

router = APIRouter()


@router.get(
    path="/settings/default-category",
    description="Category whose tags scope the gallery while no tag is selected.",
    response_model=DefaultCategoryResponse,
    status_code=status.HTTP_200_OK,
)
async def get_default_category(
    store: CollectionStore = Depends(get_collection_store),
) -> DefaultCategoryResponse:
    return DefaultCategoryResponse(category_id=store.default_category_id)


@router.put(
    path="/settings/default-category",
    description="Set or clear (null) the default category.",
    response_model=DefaultCategoryResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def set_default_category(
    update: DefaultCategoryUpdate,
    store: CollectionStore = Depends(get_collection_store),
) -> DefaultCategoryResponse:
    """Persist the default category.

    Args:
        update (DefaultCategoryUpdate): Category id, or null to clear it.
        store (CollectionStore): Shared collection store.

    Returns:
        DefaultCategoryResponse: The stored default category.

    Raises:
        HTTPException: 404 if the category is unknown, 502 on store failure.
    """
    try:
        if update.category_id is not None:
            store.get_category(update.category_id)
        await store.set_default_category(update.category_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return DefaultCategoryResponse(category_id=store.default_category_id)
