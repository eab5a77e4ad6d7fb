"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.responses import RedirectResponse

from crud_oauth.config import Settings
from crud_oauth.database import Base, init_db
from crud_oauth.errors import ProviderError
from crud_oauth.main import create_app
from crud_oauth.services.oauth import OAuthProfile
from crud_oauth.services.passwords import PasswordHasher
from crud_oauth.services.session_bridge import SessionBridge
from crud_oauth.services.tokens import TokenService
from crud_oauth.services.users import UserStore

TEST_JWT_SECRET = "test-jwt-secret"  # noqa: S105
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: str | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeIdentityProvider:
    """Stands in for Google: each registered code yields one profile, once."""

    def __init__(self):
        self.profiles: dict[str, OAuthProfile] = {}
        self.exchanges = 0

    def add_code(self, code: str, profile: OAuthProfile) -> None:
        self.profiles[code] = profile

    async def authorize_redirect(self, request):
        request.session["_state_google"] = "fake-state"
        return RedirectResponse(f"{GOOGLE_AUTHORIZE_URL}?scope=openid+email+profile", status_code=302)

    async def fetch_profile(self, request) -> OAuthProfile:
        self.exchanges += 1
        profile = self.profiles.pop(request.query_params.get("code"), None)
        if profile is None:
            raise ProviderError("invalid_grant: code already used or unknown", reason="provider_error")
        return profile


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        jwt_secret=TEST_JWT_SECRET,
        bcrypt_rounds=4,
        frontend_url="http://localhost:3000",
        backend_url="http://testserver",
        db_retry_delay_seconds=0,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(TEST_JWT_SECRET)


@pytest.fixture
def store(db, hasher):
    return UserStore(db, hasher)


@pytest.fixture
def session_bridge():
    return SessionBridge("connect.sid")


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(settings, engine, identity_provider):
    """Create a test client backed by the in-memory database."""
    app = create_app(settings, engine=engine, identity_provider=identity_provider)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Register and log in a user, returning bearer headers."""
    email = "test@example.com"
    response = client.post(
        "/registro",
        json={"name": "Test User", "email": email, "password": "testpass123"},
    )
    assert response.status_code == 201

    response = client.post("/login", json={"email": email, "password": "testpass123"})
    assert response.status_code == 200
    data = response.json()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=email,
    )
