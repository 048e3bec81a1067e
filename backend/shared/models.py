"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API-facing models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthenticatedUser(CamelModel):
    """
    Represents an authenticated wallet user in the system.

    This model is populated from session token claims and handed to route
    handlers via dependency injection. Handlers receive it as an explicit
    argument; nothing is attached to the request object.
    """

    id: str = Field(..., description="User ID (UUID)")
    wallet_address: str = Field(..., description="Stellar account address (G...)")
    issued_at: datetime = Field(..., description="When the session token was issued")
    expires_at: datetime = Field(..., description="When the session token expires")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,  # Make immutable for safety
    )
