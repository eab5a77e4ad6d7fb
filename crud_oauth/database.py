"""Database configuration and session management."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Generator
from typing import Any

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from crud_oauth.config import Settings

logger = logging.getLogger(__name__)

Base: Any = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """Create the engine for the configured database URL."""
    connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
    return create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


async def connect_with_retry(
    engine: Engine,
    delay_seconds: float,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> int:
    """Block until the database accepts a connection.

    Retries forever with a fixed delay. Returns the number of failed
    attempts before the connection succeeded.
    """
    failures = 0
    while True:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            failures += 1
            logger.warning(
                f"Database connection failed (attempt {failures}): {e}. "
                f"Retrying in {delay_seconds}s"
            )
            await sleep(delay_seconds)
            continue
        logger.info(f"Connected to database at {engine.url.render_as_string(hide_password=True)}")
        return failures


def init_db(engine: Engine) -> None:
    """Initialize the database by creating all tables."""
    # Import all models here so they are registered with Base.metadata
    from crud_oauth import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
