"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from crud_oauth.api import auth, users
from crud_oauth.api.errors import register_exception_handlers
from crud_oauth.config import Settings, get_settings
from crud_oauth.database import connect_with_retry, create_db_engine, create_session_factory, init_db
from crud_oauth.logging_config import configure_logging
from crud_oauth.middleware import RequestLoggingMiddleware
from crud_oauth.services.oauth import GoogleIdentityProvider
from crud_oauth.services.passwords import PasswordHasher
from crud_oauth.services.session_bridge import SessionBridge
from crud_oauth.services.tokens import TokenService

logger = logging.getLogger(__name__)


def _mask(value: str) -> str:
    return f"{value[:20]}..." if value else "<unset>"


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    identity_provider: GoogleIdentityProvider | None = None,
) -> FastAPI:
    """Build the application and every collaborator it needs.

    Nothing is registered globally: the settings object and the services
    built from it live on ``app.state`` and reach handlers through
    dependencies.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    owns_engine = engine is None
    engine = engine or create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wait for the database, create tables, release the pool on shutdown."""
        await connect_with_retry(engine, settings.db_retry_delay_seconds)
        init_db(engine)
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title="CRUD OAuth API",
        description="User CRUD with local and Google authentication",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.password_hasher = PasswordHasher(settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expiration_minutes
    )
    app.state.session_bridge = SessionBridge(
        settings.session_cookie_name,
        https_only=settings.session_https_only,
        same_site=settings.session_same_site,
    )
    app.state.identity_provider = identity_provider or GoogleIdentityProvider(settings)

    logger.info(
        f"OAuth config: backend={settings.backend_url} callback={settings.google_callback_url} "
        f"client_id={_mask(settings.google_client_id)} environment={settings.environment}"
    )

    register_exception_handlers(app)

    # Last added runs first
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age_seconds,
        same_site=settings.session_same_site,
        https_only=settings.session_https_only,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    if settings.is_production:
        # Behind the hosting proxy; keep https in generated URLs
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

    app.include_router(auth.router)
    app.include_router(users.router)

    @app.get("/")
    async def root():
        """Service banner."""
        return {
            "message": "Servidor funcionando",
            "status": "Backend listo con JWT + OAuth",
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {"status": "healthy", "environment": request.app.state.settings.environment}

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "crud_oauth.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        proxy_headers=settings.is_production,
    )


if __name__ == "__main__":
    run()
