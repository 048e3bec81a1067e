"""API models package."""

from .errors import AUTH_ERROR_RESPONSES, ErrorResponse

__all__ = [
    "AUTH_ERROR_RESPONSES",
    "ErrorResponse",
]
