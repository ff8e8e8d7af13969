import logging

from application.converters.atom_converter import AtomConverter
from application.rest.errors import error_responses, to_http_exception
from application.rest.schemas.input.atom_input import AtomCreate, AtomUpdate, GalleryQuery
from application.rest.schemas.output.atom_output import (
    AddAtomResponse,
    AtomResponse,
    GalleryResponse,
)
from application.rest.schemas.output.common_output import ErrorResponse
from domain.errors import AtomStoreError
from domain.services.collection_store import CollectionStore
from domain.services.filter_service import build_filter_context, filter_atoms
from fastapi import APIRouter, Depends, HTTPException, status
from utils.dependencies import get_collection_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    path="/atoms",
    description="Add an atom, creating its missing tags and creators.",
    response_model=AddAtomResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_201_CREATED: {
            "model": AddAtomResponse,
            "description": "Atom added successfully.",
        },
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "Invalid atom data.",
            "content": {
                "application/json": {
                    "example": {"detail": "media_source_link is required"}
                }
            },
        },
        status.HTTP_409_CONFLICT: {
            "model": ErrorResponse,
            "description": "Atom added but linking its creators failed.",
        },
        status.HTTP_502_BAD_GATEWAY: {
            "model": ErrorResponse,
            "description": "Remote store rejected the atom.",
            "content": {
                "application/json": {
                    "example": {"detail": "Failed to add atom: connection refused"}
                }
            },
        },
    },
)
async def add_atom(
    atom_create: AtomCreate,
    store: CollectionStore = Depends(get_collection_store),
) -> AddAtomResponse:
    """Add a new atom.

    The title defaults to "Untitled" and the content type to "image". Idea
    atoms are additionally tagged with their own normalized title.

    Args:
        atom_create (AtomCreate): Pydantic schema of the new atom.
        store (CollectionStore): Shared collection store.

    Returns:
        AddAtomResponse: ``{"success": true, "atom": {...}}``.

    Raises:
        HTTPException: 400 for invalid data, 409 if the atom was stored but
            its creators were not linked, 502 if the remote store failed.

    Example:
        >>> body = AtomCreate(title="Moodboard", content_type="idea", media_source_link="idea://1")
        >>> response = await add_atom(body, store)
        >>> response.atom.tags
        ['moodboard']
    """
    try:
        payload = AtomConverter.create_input_to_payload(atom_create)
        atom = await store.add_atom_with_creators(payload)
        return AddAtomResponse(success=True, atom=AtomResponse.from_entity(atom))
    except AtomStoreError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.error(f"Error adding atom: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add atom",
        ) from e


@router.get(
    path="/atoms",
    description="Gallery of atoms filtered by search, tags, content types, creators and idea scope.",
    response_model=GalleryResponse,
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_200_OK: {
            "model": GalleryResponse,
            "description": "Page of visible atoms with pagination info.",
        },
        **error_responses(status.HTTP_502_BAD_GATEWAY),
    },
)
async def get_gallery(
    query: GalleryQuery = Depends(),
    store: CollectionStore = Depends(get_collection_store),
) -> GalleryResponse:
    """Return one page of the filtered gallery.

    The pseudo-tags ``flagged`` and ``no-tag`` may be passed in ``tags``.
    When ``idea_id`` is given the idea's children are fetched first.

    Args:
        query (GalleryQuery): Filter and pagination query parameters.
        store (CollectionStore): Shared collection store.

    Returns:
        GalleryResponse: Atoms of the page plus pagination metadata.
    """
    try:
        child_ids = None
        if query.idea_id is not None:
            child_ids = await store.fetch_child_atom_ids(query.idea_id)
        criteria = AtomConverter.query_to_criteria(query)
        visible = filter_atoms(
            store.atoms, criteria, build_filter_context(store, child_ids)
        )
        return AtomConverter.page_to_response(visible, query)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.get(
    path="/atoms/{atom_id}",
    description="Retrieve a single atom.",
    response_model=AtomResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(status.HTTP_404_NOT_FOUND),
)
async def get_atom(
    atom_id: int, store: CollectionStore = Depends(get_collection_store)
) -> AtomResponse:
    try:
        return AtomResponse.from_entity(store.get_atom(atom_id))
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.patch(
    path="/atoms/{atom_id}",
    description="Partially update an atom.",
    response_model=AtomResponse,
    status_code=status.HTTP_200_OK,
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_409_CONFLICT,
        status.HTTP_502_BAD_GATEWAY,
    ),
)
async def update_atom(
    atom_id: int,
    atom_update: AtomUpdate,
    store: CollectionStore = Depends(get_collection_store),
) -> AtomResponse:
    """Write only the fields present in the request body.

    Args:
        atom_id (int): Atom to update.
        atom_update (AtomUpdate): Fields to change.
        store (CollectionStore): Shared collection store.

    Returns:
        AtomResponse: The atom after the update.

    Raises:
        HTTPException: 400 if no field is given, 404 if the atom is unknown,
            409 if creators could not be re-linked, 502 on store failure.
    """
    try:
        store.get_atom(atom_id)
        atom = await store.update_atom(atom_id, atom_update.to_partial())
        return AtomResponse.from_entity(atom)
    except AtomStoreError as e:
        raise to_http_exception(e) from e


@router.delete(
    path="/atoms/{atom_id}",
    description="Delete an atom.",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        status.HTTP_204_NO_CONTENT: {"description": "Atom deleted successfully."},
        **error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_502_BAD_GATEWAY),
    },
)
async def delete_atom(
    atom_id: int, store: CollectionStore = Depends(get_collection_store)
) -> None:
    try:
        store.get_atom(atom_id)
        await store.delete_atom(atom_id)
    except AtomStoreError as e:
        raise to_http_exception(e) from e
