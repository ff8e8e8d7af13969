"""Common output schemas for API responses.

This module contains shared Pydantic models for common API responses
like error messages and status information.
"""

from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Schema for error responses across all endpoints.

    Attributes:
        detail (str): Detailed error message.
        error_code (str, optional): Specific error code for categorization.

    Example:
        >>> error_response = ErrorResponse(
        ...     detail="Tag with ID 7 not found",
        ...     error_code="NOT_FOUND"
        ... )
    """

    detail: str
    error_code: Optional[str] = None


class MessageResponse(BaseModel):
    """Schema for simple message responses.

    Attributes:
        success (bool): Whether the operation succeeded.
        message (str, optional): Informational message.
        data (Any, optional): Additional response data.

    Example:
        >>> MessageResponse(success=True, message="Relationship already exists")
    """

    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None


class HealthResponse(BaseModel):
    """Schema for health check responses.

    Attributes:
        status (str): Service health status.
        service (str): Service name identifier.

    Example:
        >>> health_response = HealthResponse(
        ...     status="healthy",
        ...     service="atoms-service"
        ... )
    """

    status: str
    service: str
