from typing import List

from application.converters.tag_converter import CategoryConverter, TagConverter
from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.tag_input import MergeRequest
from application.rest.schemas.input.taxonomy_input import CategoryCreate, CategoryUpdate
from application.rest.schemas.output.common_output import MessageResponse
from application.rest.schemas.output.tag_output import TagResponse
from application.rest.schemas.output.taxonomy_output import CategoryResponse
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from domain.services.relationship_service import MergeService
from fastapi import APIRouter, Depends, status
from utils.dependencies import get_collection_store, get_merge_service

router = APIRouter()


@router.get(
    path="/categories",
    description="Retrieve all categories ordered by name.",
    response_model=List[CategoryResponse],
    status_code=status.HTTP_200_OK,
)
async def get_categories(
    store: CollectionStore = Depends(get_collection_store),
) -> List[CategoryResponse]:
    return CategoryConverter.entities_to_responses(store.categories)


@router.post(
    path="/categories",
    description="Create a category.",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(status.HTTP_400_BAD_REQUEST, status.HTTP_502_BAD_GATEWAY),
)
async def create_category(
    category_create: CategoryCreate,
    store: CollectionStore = Depends(get_collection_store),
) -> CategoryResponse:
    try:
        category = await store.add_category(
            category_create.name,
            description=category_create.description,
            is_private=category_create.is_private,
        )
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return CategoryResponse.from_entity(category)


@router.put(
    path="/categories/{category_id}",
    description="Update a category's name, description or private flag.",
    response_model=CategoryResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    store: CollectionStore = Depends(get_collection_store),
) -> CategoryResponse:
    try:
        category = await store.update_category(
            category_id,
            name=category_update.name,
            is_private=category_update.is_private,
            description=category_update.description,
        )
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return CategoryResponse.from_entity(category)


@router.delete(
    path="/categories/{category_id}",
    description="Delete a category. Clears the default category if it was this one.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def delete_category(
    category_id: int, store: CollectionStore = Depends(get_collection_store)
) -> None:
    try:
        store.get_category(category_id)
        await store.delete_category(category_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.post(
    path="/categories/merge",
    description="Move every tag of the source category to the target and delete the source.",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def merge_categories(
    merge: MergeRequest,
    merge_service: MergeService = Depends(get_merge_service),
) -> MessageResponse:
    """Merge two categories.

    Args:
        merge (MergeRequest): Source and target category ids.
        merge_service (MergeService): Merge service bound to the shared store.

    Returns:
        MessageResponse: Success envelope.

    Raises:
        HTTPException: 409 if the tags moved but the source survived.
    """
    try:
        await merge_service.merge_category(merge.source_id, merge.target_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return MessageResponse(
        success=True,
        message=f"Merged category {merge.source_id} into {merge.target_id}",
    )


@router.get(
    path="/categories/{category_id}/tags",
    description="Tags assigned to a category.",
    response_model=List[TagResponse],
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_404_NOT_FOUND),
)
async def get_category_tags(
    category_id: int, store: CollectionStore = Depends(get_collection_store)
) -> List[TagResponse]:
    try:
        store.get_category(category_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return TagConverter.entities_to_responses(store.get_category_tags(category_id))


@router.post(
    path="/categories/{category_id}/tags/{tag_id}",
    description="Assign a tag to a category.",
    response_model=List[TagResponse],
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def assign_tag_to_category(
    category_id: int,
    tag_id: int,
    store: CollectionStore = Depends(get_collection_store),
) -> List[TagResponse]:
    try:
        store.get_category(category_id)
        store.get_tag(tag_id)
        await store.assign_tag_to_category(category_id, tag_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return TagConverter.entities_to_responses(store.get_category_tags(category_id))


@router.delete(
    path="/categories/{category_id}/tags/{tag_id}",
    description="Remove a tag from a category.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def remove_tag_from_category(
    category_id: int,
    tag_id: int,
    store: CollectionStore = Depends(get_collection_store),
) -> None:
    try:
        store.get_category(category_id)
        await store.remove_tag_from_category(category_id, tag_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
