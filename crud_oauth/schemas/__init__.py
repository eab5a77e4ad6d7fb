"""Pydantic schemas for API requests and responses."""

from crud_oauth.schemas.auth import AuthResponse, MessageResponse, UserLogin, UserRegister
from crud_oauth.schemas.user import (
    UserCreate,
    UserEnvelope,
    UserListResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "MessageResponse",
    "UserCreate",
    "UserUpdate",
    "UserSummary",
    "UserResponse",
    "UserEnvelope",
    "UserListResponse",
]
