"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from crud_oauth.config import Settings
from crud_oauth.database import get_db
from crud_oauth.errors import MissingTokenError, NotFoundError
from crud_oauth.models.user import User
from crud_oauth.services.oauth import GoogleIdentityProvider, OAuthHandshake
from crud_oauth.services.passwords import PasswordHasher
from crud_oauth.services.session_bridge import SessionBridge
from crud_oauth.services.tokens import TokenClaims, TokenService
from crud_oauth.services.users import UserStore

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_session_bridge(request: Request) -> SessionBridge:
    return request.app.state.session_bridge


def get_identity_provider(request: Request) -> GoogleIdentityProvider:
    return request.app.state.identity_provider


def get_user_store(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserStore:
    """Get the credential store bound to this request's database session."""
    return UserStore(db, hasher)


def get_oauth_handshake(
    settings: Annotated[Settings, Depends(get_app_settings)],
    provider: Annotated[GoogleIdentityProvider, Depends(get_identity_provider)],
    store: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionBridge, Depends(get_session_bridge)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> OAuthHandshake:
    return OAuthHandshake(provider, store, sessions, tokens, settings.frontend_url)


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims:
    """Verify the bearer token. Sessions are never consulted here."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return tokens.verify(credentials.credentials)


def get_current_user(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> User:
    """Get the user the bearer token was issued to."""
    user = store.find_by_id(claims.user_id)
    if user is None:
        raise NotFoundError()
    return user
