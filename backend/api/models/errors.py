"""
Error response models.

Standardized error responses for the API.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format: a machine code plus a safe message."""

    error: str
    message: str


# OpenAPI response docs shared by the auth routes
AUTH_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
    401: {"model": ErrorResponse, "description": "Authentication failed"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}
