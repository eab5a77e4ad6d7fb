"""Authentication API endpoints: local credentials, Google sign-in and logout."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from crud_oauth.api.dependencies import (
    get_oauth_handshake,
    get_password_hasher,
    get_session_bridge,
    get_token_service,
    get_user_store,
)
from crud_oauth.errors import AuthenticationError, InternalError, ValidationError
from crud_oauth.models.enums import AuthMode
from crud_oauth.models.user import User
from crud_oauth.schemas.auth import AuthResponse, MessageResponse, UserLogin, UserRegister
from crud_oauth.schemas.user import UserEnvelope, UserResponse
from crud_oauth.services.oauth import OAuthHandshake
from crud_oauth.services.passwords import PasswordHasher
from crud_oauth.services.session_bridge import SessionBridge
from crud_oauth.services.tokens import TokenService
from crud_oauth.services.users import NewUser, UserStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

ALL_FIELDS_REQUIRED = "Todos los campos son requeridos"


def _session_user(request: Request, sessions: SessionBridge, store: UserStore, message: str) -> User:
    user = sessions.resolve(request.session, store)
    if user is None:
        raise AuthenticationError(message)
    return user


@router.post("/registro", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Register a new local user."""
    if not (user_data.name and user_data.email and user_data.password):
        raise ValidationError(ALL_FIELDS_REQUIRED)

    user = store.create(
        NewUser(
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
            auth_mode=AuthMode.LOCAL,
        )
    )
    return UserEnvelope(message="Usuario registrado exitosamente", user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email and password."""
    if not (credentials.email and credentials.password):
        raise ValidationError("Correo y contraseña son requeridos")

    user = store.find_by_email(credentials.email)
    if user is None or not hasher.verify(credentials.password, user.password_hash):
        logger.info(f"Failed login for {credentials.email.strip().lower()}")
        raise AuthenticationError()

    return AuthResponse(
        message="Login exitoso",
        token=tokens.issue(user.id, user.email),
        user=UserResponse.model_validate(user),
    )


@router.get("/auth/google")
async def google_login(
    request: Request,
    handshake: Annotated[OAuthHandshake, Depends(get_oauth_handshake)],
):
    """Redirect the user to Google for authentication."""
    return await handshake.start(request)


@router.get("/auth/google/callback")
async def google_callback(
    request: Request,
    handshake: Annotated[OAuthHandshake, Depends(get_oauth_handshake)],
) -> RedirectResponse:
    """Finish the Google handshake and hand the token to the frontend."""
    outcome = await handshake.complete(request)
    return RedirectResponse(url=outcome.redirect_url, status_code=status.HTTP_302_FOUND)


@router.get("/auth/session", response_model=UserEnvelope)
async def session_user(
    request: Request,
    store: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionBridge, Depends(get_session_bridge)],
):
    """Return the principal bound to the session by the Google handshake."""
    user = _session_user(request, sessions, store, "No autenticado. Por favor, inicia sesión con Google")
    return UserEnvelope(message="Sesión activa", user=UserResponse.model_validate(user))


@router.get("/auth/google/token", response_model=AuthResponse)
async def session_token(
    request: Request,
    store: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionBridge, Depends(get_session_bridge)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Mint a bearer token for the session principal."""
    user = _session_user(request, sessions, store, "Usuario no autenticado")
    return AuthResponse(
        message="Token generado",
        token=tokens.issue(user.id, user.email),
        user=UserResponse.model_validate(user),
    )


@router.get("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    sessions: Annotated[SessionBridge, Depends(get_session_bridge)],
):
    """Destroy the server-side session and its cookie."""
    response = JSONResponse({"message": "Sesión cerrada exitosamente"})
    try:
        sessions.unbind(request.session, response)
    except Exception as e:
        logger.error(f"Session teardown failed: {e}", exc_info=True)
        raise InternalError("Error al cerrar sesión") from e
    return response
