"""Authentication schemas."""

from pydantic import BaseModel

from crud_oauth.schemas.user import UserResponse


class UserRegister(BaseModel):
    """User registration request."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserLogin(BaseModel):
    """User login request."""

    email: str | None = None
    password: str | None = None


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    message: str
    token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
