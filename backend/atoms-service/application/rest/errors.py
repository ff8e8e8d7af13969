"""Translation of domain exceptions into HTTP errors.

Routers catch ``AtomStoreError`` and raise the result of
``to_http_exception`` chained from the original exception.
"""

import logging

from domain.errors import (
    AtomStoreError,
    EntityNotFoundError,
    PartialConsistencyError,
    RemoteError,
    ValidationError,
)
from fastapi import HTTPException, status

from application.rest.schemas.output.common_output import ErrorResponse

logger = logging.getLogger(__name__)


def to_http_exception(error: AtomStoreError) -> HTTPException:
    """Map a domain exception to the HTTPException the client receives.

    Args:
        error (AtomStoreError): Exception raised by the domain layer.

    Returns:
        HTTPException: 400, 404, 409, 502 or 500 with the error message.

    Example:
        >>> to_http_exception(EntityNotFoundError("Tag with ID 7 not found")).status_code
        404
    """
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, PartialConsistencyError):
        logger.error(f"Partially applied operation: {error} (completed: {error.completed})")
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, RemoteError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error)
    )


def error_responses(*status_codes: int) -> dict:
    """Build the ``responses`` entries for the given error status codes."""
    descriptions = {
        status.HTTP_400_BAD_REQUEST: "Invalid request data.",
        status.HTTP_404_NOT_FOUND: "Referenced entity not found.",
        status.HTTP_409_CONFLICT: "Operation partially applied; re-run it to complete.",
        status.HTTP_502_BAD_GATEWAY: "Remote store call failed.",
        status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal server error.",
    }
    return {
        code: {"model": ErrorResponse, "description": descriptions[code]}
        for code in status_codes
    }
