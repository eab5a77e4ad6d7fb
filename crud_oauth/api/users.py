"""User profile and CRUD endpoints, authorized by bearer token only."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from crud_oauth.api.dependencies import get_current_user, get_token_claims, get_user_store
from crud_oauth.errors import NotFoundError, ValidationError
from crud_oauth.models.enums import AuthMode
from crud_oauth.models.user import User
from crud_oauth.schemas.user import UserCreate, UserEnvelope, UserListResponse, UserResponse, UserUpdate
from crud_oauth.services.tokens import TokenClaims
from crud_oauth.services.users import NewUser, UserChanges, UserStore, is_valid_user_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _checked_id(user_id: str) -> str:
    if not is_valid_user_id(user_id):
        raise ValidationError("ID inválido")
    return user_id.lower()


def _envelope(message: str, user: User) -> UserEnvelope:
    return UserEnvelope(message=message, user=UserResponse.model_validate(user))


@router.get("/perfil", response_model=UserEnvelope)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return _envelope("Datos del perfil", current_user)


@router.get("/usuarios", response_model=UserListResponse)
async def list_users(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """List every user."""
    users = store.list_all()
    logger.debug(f"User {claims.user_id} listed {len(users)} users")
    return UserListResponse(count=len(users), users=[UserResponse.model_validate(u) for u in users])


@router.get("/usuarios/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: str,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Get a single user."""
    user = store.find_by_id(_checked_id(user_id))
    if user is None:
        raise NotFoundError()
    return _envelope("Usuario encontrado", user)


@router.post("/usuarios", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Create a local user on behalf of an authenticated caller."""
    if not (user_data.name and user_data.email and user_data.password):
        raise ValidationError("Todos los campos son requeridos")

    user = store.create(
        NewUser(
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
            auth_mode=AuthMode.LOCAL,
        )
    )
    return _envelope("Usuario creado exitosamente", user)


@router.put("/usuarios/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Update name, email or password. Empty values leave a field unchanged."""
    user = store.update(
        _checked_id(user_id),
        UserChanges(
            name=user_data.name or None,
            email=user_data.email or None,
            password=user_data.password or None,
        ),
    )
    return _envelope("Usuario actualizado exitosamente", user)


@router.delete("/usuarios/{user_id}", response_model=UserEnvelope)
async def delete_user(
    user_id: str,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Delete a user."""
    user = store.delete(_checked_id(user_id))
    return _envelope("Usuario eliminado exitosamente", user)
