"""Request/response schemas for the API layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# --- Auth ---


class UserResponse(BaseModel):
    """User returned by a successful API key login."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None
    last_name: str | None
    leetstack_username: str | None
    username: str
