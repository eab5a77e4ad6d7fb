"""Google OAuth2 authorization-code handshake.

The handshake moves START -> CALLBACK_RECEIVED -> CODE_EXCHANGED ->
RESOLVED -> COMPLETE, and may drop to FAILED from any step after START.
Every failure ends in a redirect to the frontend with ``error=auth_failed``;
the browser is mid-navigation and never sees an HTTP error status.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.starlette_client import OAuth
from starlette.requests import Request
from starlette.responses import Response

from crud_oauth.config import Settings
from crud_oauth.errors import (
    DuplicateEmailError,
    DuplicateOAuthIdError,
    InternalError,
    ProviderError,
    ValidationError,
)
from crud_oauth.models.enums import AuthMode
from crud_oauth.models.user import User
from crud_oauth.schemas.user import UserSummary
from crud_oauth.services.session_bridge import SessionBridge
from crud_oauth.services.tokens import TokenService
from crud_oauth.services.users import NewUser, UserStore, normalize_email

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = "openid email profile"


class HandshakeState(str, Enum):
    """States of the authorization-code flow."""

    START = "start"
    CALLBACK_RECEIVED = "callback_received"
    CODE_EXCHANGED = "code_exchanged"
    RESOLVED = "resolved"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class OAuthProfile:
    """Identity returned by the provider after the code exchange."""

    subject: str | None
    email: str | None
    display_name: str | None = None
    avatar_url: str | None = None


@dataclass
class IdentityResult:
    """Either the resolved user or the reason resolution failed."""

    user: User | None = None
    error: ProviderError | None = None
    created: bool = False

    @property
    def ok(self) -> bool:
        return self.user is not None


@dataclass
class HandshakeOutcome:
    """Where the browser goes next, plus what the handshake produced."""

    state: HandshakeState
    redirect_url: str
    user: User | None = None
    token: str | None = None
    reason: str | None = None


class GoogleIdentityProvider:
    """Authlib client for Google's OpenID Connect endpoints."""

    def __init__(self, settings: Settings):
        self.callback_url = settings.google_callback_url
        self.oauth = OAuth()
        self.oauth.register(
            name="google",
            server_metadata_url=settings.google_metadata_url,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            client_kwargs={"scope": GOOGLE_SCOPES},
        )

    async def authorize_redirect(self, request: Request) -> Response:
        """Redirect the browser to Google's consent screen."""
        return await self.oauth.google.authorize_redirect(request, self.callback_url)

    async def fetch_profile(self, request: Request) -> OAuthProfile:
        """Exchange the callback's code for the user's profile.

        Codes are single use, so a replayed callback fails here too.
        """
        try:
            token = await self.oauth.google.authorize_access_token(request)
            userinfo = token.get("userinfo")
            if not userinfo:
                userinfo = await self.oauth.google.userinfo(token=token)
            return OAuthProfile(
                subject=userinfo.get("sub"),
                email=userinfo.get("email"),
                display_name=userinfo.get("name"),
                avatar_url=userinfo.get("picture"),
            )
        except AuthlibBaseError as e:
            # OAuthError and id_token claim failures (JoseError) share this base
            raise ProviderError(f"Google rejected the authorization: {e.error}", reason="provider_error") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Could not reach Google: {e}", reason="provider_unreachable") from e
        except (KeyError, ValueError) as e:
            raise ProviderError(f"Unexpected Google profile payload: {e!r}", reason="provider_error") from e


class OAuthHandshake:
    """Drives the Google sign-in flow and links the identity to a user record."""

    def __init__(
        self,
        provider: GoogleIdentityProvider,
        store: UserStore,
        sessions: SessionBridge,
        tokens: TokenService,
        frontend_url: str,
    ):
        self.provider = provider
        self.store = store
        self.sessions = sessions
        self.tokens = tokens
        self.frontend_url = frontend_url.rstrip("/")

    async def start(self, request: Request) -> Response:
        return await self.provider.authorize_redirect(request)

    async def complete(self, request: Request) -> HandshakeOutcome:
        """Handle the provider's redirect back to the callback URL."""
        state = HandshakeState.CALLBACK_RECEIVED

        provider_error = request.query_params.get("error")
        if provider_error:
            return self._fail(
                state, ProviderError(f"Google returned error={provider_error}", reason="access_denied")
            )

        try:
            profile = await self.provider.fetch_profile(request)
        except ProviderError as e:
            return self._fail(state, e)
        state = HandshakeState.CODE_EXCHANGED

        result = self.resolve_identity(profile)
        if not result.ok:
            return self._fail(state, result.error)
        user = result.user
        state = HandshakeState.RESOLVED

        self.sessions.bind(request.session, user)

        token = self.tokens.issue(user.id, user.email)
        logger.info(f"Google sign-in complete for user {user.id} (new={result.created})")
        return HandshakeOutcome(
            state=HandshakeState.COMPLETE,
            redirect_url=self.success_url(token, user),
            user=user,
            token=token,
        )

    def resolve_identity(self, profile: OAuthProfile) -> IdentityResult:
        """Find the user linked to this Google identity, creating one if unseen.

        Returning users are matched on the provider subject only. An email
        that already belongs to another account is refused rather than merged.
        Store failures come back as a ``store`` error, never as an exception.
        """
        if not profile.subject or not profile.email:
            return IdentityResult(error=ProviderError("Google profile lacks subject or email", reason="profile"))

        try:
            user = self.store.find_by_oauth_id(profile.subject)
            if user is not None:
                return IdentityResult(user=user)

            if self.store.find_by_email(profile.email) is not None:
                logger.warning(f"Google identity {profile.subject} uses an email already registered")
                return IdentityResult(error=ProviderError(reason="email_in_use"))

            return self._create_google_user(profile)
        except InternalError as e:
            return IdentityResult(error=ProviderError(e.message, reason="store"))

    def _create_google_user(self, profile: OAuthProfile) -> IdentityResult:
        email = normalize_email(profile.email)
        name = (profile.display_name or "").strip() or email.split("@")[0]
        try:
            user = self.store.create(
                NewUser(
                    name=name,
                    email=email,
                    auth_mode=AuthMode.OAUTH,
                    oauth_id=profile.subject,
                    avatar_url=profile.avatar_url,
                )
            )
        except DuplicateOAuthIdError:
            # Lost a race against a concurrent callback for the same identity
            user = self.store.find_by_oauth_id(profile.subject)
            if user is None:
                return IdentityResult(error=ProviderError(reason="store"))
            return IdentityResult(user=user)
        except DuplicateEmailError:
            return IdentityResult(error=ProviderError(reason="email_in_use"))
        except ValidationError as e:
            return IdentityResult(error=ProviderError(e.message, reason="profile"))
        return IdentityResult(user=user, created=True)

    def success_url(self, token: str, user: User) -> str:
        summary = UserSummary.model_validate(user).model_dump_json(by_alias=True)
        return f"{self.frontend_url}/?{urlencode({'token': token, 'user': summary})}"

    def failure_url(self, reason: str) -> str:
        return f"{self.frontend_url}/?{urlencode({'error': 'auth_failed', 'reason': reason})}"

    def _fail(self, state: HandshakeState, error: ProviderError) -> HandshakeOutcome:
        logger.warning(f"Google sign-in failed after {state.value}: {error.reason} ({error.message})")
        return HandshakeOutcome(
            state=HandshakeState.FAILED,
            redirect_url=self.failure_url(error.reason),
            reason=error.reason,
        )
