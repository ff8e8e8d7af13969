import logging

from application.converters.tag_converter import TagConverter
from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.tag_input import MergeRequest, TagCreate, TagUpdate
from application.rest.schemas.output.common_output import ErrorResponse
from application.rest.schemas.output.tag_output import (
    TagListResponse,
    TagMergeResponse,
    TagResponse,
)
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from domain.services.relationship_service import MergeService
from fastapi import APIRouter, Depends, HTTPException, status
from utils.dependencies import get_collection_store, get_merge_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    path="/tags",
    description="Retrieve all tags ordered by usage count.",
    response_model=TagListResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": TagListResponse,
            "description": "All tags, most used first.",
        },
    },
)
async def get_tags(
    store: CollectionStore = Depends(get_collection_store),
) -> TagListResponse:
    """Get all tags from the collection store.

    Args:
        store (CollectionStore): Shared collection store.

    Returns:
        TagListResponse: ``{"tags": [...]}``.

    Example:
        >>> response = await get_tags(store)
        >>> print([tag.name for tag in response.tags])
        ['sky', 'street art']
    """
    return TagConverter.entities_to_list_response(store.tags)


@router.post(
    path="/tags",
    description="Create a tag. Creating a tag whose normalized name exists returns the existing tag.",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_201_CREATED: {
            "model": TagResponse,
            "description": "Tag created (or already present).",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Tag name is empty after normalization.",
            "content": {
                "application/json": {
                    "example": {"detail": "Tag name cannot be empty or whitespace"}
                }
            },
        },
        **error_responses(status.HTTP_502_BAD_GATEWAY),
    },
)
async def create_tag(
    tag_create: TagCreate,
    store: CollectionStore = Depends(get_collection_store),
) -> TagResponse:
    """Create a new tag.

    Args:
        tag_create (TagCreate): Pydantic schema containing tag creation data.
        store (CollectionStore): Shared collection store.

    Returns:
        TagResponse: Created or existing tag.

    Raises:
        HTTPException: 400 if the name is empty after normalization.
        HTTPException: 502 if the remote insert failed.

    Example:
        >>> created_tag = await create_tag(TagCreate(name=" Street  Art "), store)
        >>> print(created_tag.name)
        "street art"
    """
    try:
        tag = await store.add_tag(
            tag_create.name,
            is_private=tag_create.is_private,
            category_id=tag_create.category_id,
        )
        return TagConverter.entity_to_response(tag)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.put(
    path="/tags/{tag_id}",
    description="Rename a tag or change its private flag. A rename is applied to every atom carrying the tag.",
    response_model=TagResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": TagResponse,
            "description": "Tag updated successfully.",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "New name is empty or taken by another tag.",
            "content": {
                "application/json": {
                    "example": {"detail": "Tag with name 'work' already exists"}
                }
            },
        },
        **error_responses(
            status.HTTP_404_NOT_FOUND,
            status.HTTP_409_CONFLICT,
            status.HTTP_502_BAD_GATEWAY,
        ),
    },
)
async def update_tag(
    tag_id: int,
    tag_update: TagUpdate,
    store: CollectionStore = Depends(get_collection_store),
) -> TagResponse:
    """Update an existing tag.

    Args:
        tag_id (int): Identifier of the tag.
        tag_update (TagUpdate): New name and/or private flag.
        store (CollectionStore): Shared collection store.

    Returns:
        TagResponse: Updated tag.

    Raises:
        HTTPException: 400 if the name collides, 404 if the tag is unknown,
            409 if some atoms kept the old name, 502 on store failure.
    """
    try:
        tag = await store.update_tag(
            tag_id, name=tag_update.name, is_private=tag_update.is_private
        )
        return TagConverter.entity_to_response(tag)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.delete(
    path="/tags/{tag_id}",
    description="Delete a tag.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        status.HTTP_204_NO_CONTENT: {"description": "Tag deleted successfully."},
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "Tag not found.",
            "content": {
                "application/json": {"example": {"detail": "Tag with ID 7 not found"}}
            },
        },
        **error_responses(status.HTTP_502_BAD_GATEWAY),
    },
)
async def delete_tag(
    tag_id: int, store: CollectionStore = Depends(get_collection_store)
) -> None:
    try:
        store.get_tag(tag_id)
        await store.delete_tag(tag_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.post(
    path="/tags/merge",
    description="Merge the source tag into the target tag and delete the source.",
    response_model=TagMergeResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def merge_tags(
    merge: MergeRequest,
    merge_service: MergeService = Depends(get_merge_service),
) -> TagMergeResponse:
    """Merge two tags.

    Every atom carrying the source tag is rewritten to the target tag. If
    the merge stops part way it answers 409 and can be re-run.

    Args:
        merge (MergeRequest): Source and target tag ids.
        merge_service (MergeService): Merge service bound to the shared store.

    Returns:
        TagMergeResponse: Ids of the rewritten atoms.
    """
    try:
        rewritten = await merge_service.merge_tag(merge.source_id, merge.target_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.error(f"Error merging tag {merge.source_id} into {merge.target_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to merge tags",
        ) from e
    return TagMergeResponse(rewritten_atom_ids=rewritten)
