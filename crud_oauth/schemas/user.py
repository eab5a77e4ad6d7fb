"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from crud_oauth.models.enums import AuthMode


class UserCreate(BaseModel):
    """Create a local user. Presence is checked by the endpoint."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserUpdate(BaseModel):
    """Update a user; omitted fields stay unchanged."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserSummary(BaseModel):
    """Public-safe view of a user, embedded in the OAuth redirect."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
    avatar_url: str | None = None
    auth_mode: AuthMode


class UserResponse(UserSummary):
    """User information response. Never includes the password hash."""

    created_at: datetime


class UserEnvelope(BaseModel):
    """A message plus the user it concerns."""

    message: str
    user: UserResponse


class UserListResponse(BaseModel):
    count: int
    users: list[UserResponse]
