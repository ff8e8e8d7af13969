from typing import List

from application.converters.tag_converter import CreatorConverter, TagConverter
from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.tag_input import MergeRequest
from application.rest.schemas.input.taxonomy_input import CreatorCreate, CreatorUpdate
from application.rest.schemas.output.common_output import MessageResponse
from application.rest.schemas.output.tag_output import TagResponse
from application.rest.schemas.output.taxonomy_output import CreatorResponse
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from domain.services.relationship_service import MergeService
from fastapi import APIRouter, Depends, status
from utils.dependencies import get_collection_store, get_merge_service

router = APIRouter()


@router.get(
    path="/creators",
    description="Retrieve all creators ordered by usage count.",
    response_model=List[CreatorResponse],
    status_code=status.HTTP_200_OK,
)
async def get_creators(
    store: CollectionStore = Depends(get_collection_store),
) -> List[CreatorResponse]:
    return CreatorConverter.entities_to_responses(store.creators)


@router.post(
    path="/creators",
    description="Create a creator.",
    response_model=CreatorResponse,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(status.HTTP_400_BAD_REQUEST, status.HTTP_502_BAD_GATEWAY),
)
async def create_creator(
    creator_create: CreatorCreate,
    store: CollectionStore = Depends(get_collection_store),
) -> CreatorResponse:
    try:
        creator = await store.add_creator(creator_create.name, **creator_create.links())
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return CreatorResponse.from_entity(creator)


@router.patch(
    path="/creators/{creator_id}",
    description="Partially update a creator.",
    response_model=CreatorResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def update_creator(
    creator_id: int,
    creator_update: CreatorUpdate,
    store: CollectionStore = Depends(get_collection_store),
) -> CreatorResponse:
    try:
        creator = await store.update_creator(creator_id, creator_update.to_partial())
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return CreatorResponse.from_entity(creator)


@router.delete(
    path="/creators/{creator_id}",
    description="Delete a creator.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def delete_creator(
    creator_id: int, store: CollectionStore = Depends(get_collection_store)
) -> None:
    try:
        store.get_creator(creator_id)
        await store.delete_creator(creator_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.post(
    path="/creators/merge",
    description="Rename the source creator on atoms to the target creator and delete the source.",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def merge_creators(
    merge: MergeRequest,
    merge_service: MergeService = Depends(get_merge_service),
) -> MessageResponse:
    """Merge two creators.

    Only atoms whose creator name equals the source name exactly are
    rewritten.

    Args:
        merge (MergeRequest): Source and target creator ids.
        merge_service (MergeService): Merge service bound to the shared store.

    Returns:
        MessageResponse: Success envelope.
    """
    try:
        await merge_service.merge_creator(merge.source_id, merge.target_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return MessageResponse(
        success=True,
        message=f"Merged creator {merge.source_id} into {merge.target_id}",
    )


@router.get(
    path="/creators/{creator_id}/tags",
    description="Tags assigned to a creator.",
    response_model=List[TagResponse],
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_404_NOT_FOUND),
)
async def get_creator_tags(
    creator_id: int, store: CollectionStore = Depends(get_collection_store)
) -> List[TagResponse]:
    try:
        store.get_creator(creator_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return TagConverter.entities_to_responses(store.get_creator_tags(creator_id))


@router.post(
    path="/creators/{creator_id}/tags/{tag_id}",
    description="Assign a tag to a creator.",
    response_model=List[TagResponse],
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def assign_tag_to_creator(
    creator_id: int,
    tag_id: int,
    store: CollectionStore = Depends(get_collection_store),
) -> List[TagResponse]:
    try:
        store.get_creator(creator_id)
        store.get_tag(tag_id)
        await store.assign_tag_to_creator(creator_id, tag_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return TagConverter.entities_to_responses(store.get_creator_tags(creator_id))


@router.delete(
    path="/creators/{creator_id}/tags/{tag_id}",
    description="Remove a tag from a creator.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def remove_tag_from_creator(
    creator_id: int,
    tag_id: int,
    store: CollectionStore = Depends(get_collection_store),
) -> None:
    try:
        store.get_creator(creator_id)
        await store.remove_tag_from_creator(creator_id, tag_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.post(
    path="/creators/{creator_id}/favorite",
    description="Add the creator to the favorites, or remove it if already there.",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
)
async def toggle_favorite_creator(
    creator_id: int, store: CollectionStore = Depends(get_collection_store)
) -> MessageResponse:
    try:
        creator = store.get_creator(creator_id)
        favorites = await store.toggle_favorite_creator(creator.name)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return MessageResponse(success=True, data={"favorite_creators": favorites})
