from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.relationship_input import AtomRelationshipCreate
from application.rest.schemas.output.atom_output import ChildAtomsResponse
from application.rest.schemas.output.common_output import ErrorResponse, MessageResponse
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from fastapi import APIRouter, Depends, status
from utils.dependencies import get_collection_store

router = APIRouter()


@router.post(
    path="/atom-relationships",
    description="Group an atom under an idea. Adding an existing relationship is a no-op.",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": MessageResponse,
            "description": "Relationship created or already present.",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Parent and child are the same atom.",
            "content": {
                "application/json": {"example": {"detail": "Cannot add atom to itself"}}
            },
        },
        **error_responses(status.HTTP_502_BAD_GATEWAY),
    },
)
async def add_child_atom(
    relationship: AtomRelationshipCreate,
    store: CollectionStore = Depends(get_collection_store),
) -> MessageResponse:
    """Add a child atom to an idea.

    Args:
        relationship (AtomRelationshipCreate): ``{"parentAtomId": .., "childAtomId": ..}``.
        store (CollectionStore): Shared collection store.

    Returns:
        MessageResponse: ``{"success": true}``, with a message when the
        relationship already existed.

    Raises:
        HTTPException: 400 if parent and child are equal, 502 on store failure.
    """
    try:
        created = await store.add_child_atom(
            relationship.parent_atom_id, relationship.child_atom_id
        )
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    if not created:
        return MessageResponse(success=True, message="Relationship already exists")
    return MessageResponse(success=True)


@router.get(
    path="/atom-relationships/{parent_atom_id}",
    description="List the child atom ids of an idea.",
    response_model=ChildAtomsResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_502_BAD_GATEWAY),
)
async def get_child_atoms(
    parent_atom_id: int, store: CollectionStore = Depends(get_collection_store)
) -> ChildAtomsResponse:
    try:
        child_ids = await store.fetch_child_atom_ids(parent_atom_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    return ChildAtomsResponse(parent_atom_id=parent_atom_id, child_atom_ids=child_ids)


@router.delete(
    path="/atom-relationships/{parent_atom_id}/{child_atom_id}",
    description="Remove a child atom from an idea.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_responses(status.HTTP_502_BAD_GATEWAY),
)
async def remove_child_atom(
    parent_atom_id: int,
    child_atom_id: int,
    store: CollectionStore = Depends(get_collection_store),
) -> None:
    try:
        await store.remove_child_atom(parent_atom_id, child_atom_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
