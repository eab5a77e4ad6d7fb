"""Credential store for user records."""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crud_oauth.errors import (
    DuplicateEmailError,
    DuplicateOAuthIdError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from crud_oauth.models.enums import AuthMode
from crud_oauth.models.user import User
from crud_oauth.services.passwords import PasswordHasher

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USER_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

NAME_TOO_SHORT = "El nombre debe tener al menos 2 caracteres"
INVALID_EMAIL = "Correo inválido"
PASSWORD_TOO_SHORT = "La contraseña debe tener al menos 8 caracteres"
PASSWORD_TOO_LONG = "La contraseña no puede tener más de 128 caracteres"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_user_id(user_id: str) -> bool:
    """Check the 24-hex public id format before touching the store."""
    return bool(USER_ID_PATTERN.match(user_id))


def validate_name(name: str) -> str:
    name = name.strip()
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError(NAME_TOO_SHORT)
    return name


def validate_email(email: str) -> str:
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(INVALID_EMAIL)
    return email.lower()


def validate_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(PASSWORD_TOO_SHORT)
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(PASSWORD_TOO_LONG)
    return password


@dataclass
class NewUser:
    """Fields accepted when creating a user."""

    name: str
    email: str
    password: str | None = None
    auth_mode: AuthMode = AuthMode.LOCAL
    oauth_id: str | None = None
    avatar_url: str | None = None


@dataclass
class UserChanges:
    """Fields accepted when updating a user; None means unchanged."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserStore:
    """Owns user records: lookups, validation and uniqueness."""

    def __init__(self, db: Session, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def find_by_email(self, email: str) -> User | None:
        """Get a user by email, ignoring case and surrounding whitespace."""
        with self._reading():
            return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id: str) -> User | None:
        with self._reading():
            return self.db.get(User, user_id)

    def find_by_oauth_id(self, oauth_id: str) -> User | None:
        with self._reading():
            return self.db.query(User).filter(User.oauth_id == oauth_id).first()

    def list_all(self) -> list[User]:
        with self._reading():
            return self.db.query(User).order_by(User.created_at).all()

    def create(self, fields: NewUser) -> User:
        """Validate and persist a new user.

        Local accounts must supply a password, which is hashed here. Google
        accounts must carry an oauth_id and never get a password hash.
        """
        name = validate_name(fields.name)
        email = validate_email(fields.email)

        password_hash = None
        if fields.auth_mode.has_password():
            if fields.password is None:
                raise ValidationError(PASSWORD_TOO_SHORT)
            password_hash = self.hasher.hash(validate_password(fields.password))
        elif not fields.oauth_id:
            raise ValidationError("Falta el identificador de Google")

        if self.find_by_email(email) is not None:
            raise DuplicateEmailError()
        if fields.oauth_id and self.find_by_oauth_id(fields.oauth_id) is not None:
            raise DuplicateOAuthIdError()

        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            oauth_id=fields.oauth_id or None,
            avatar_url=fields.avatar_url,
            auth_mode=fields.auth_mode,
        )
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info(f"Created {user.auth_mode.value} user {user.id} ({user.email})")
        return user

    def update(self, user_id: str, changes: UserChanges) -> User:
        """Apply name, email and password changes to an existing user."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError()

        if changes.name is not None:
            user.name = validate_name(changes.name)

        if changes.email is not None:
            email = validate_email(changes.email)
            if email != user.email:
                owner = self.find_by_email(email)
                if owner is not None and owner.id != user.id:
                    raise DuplicateEmailError()
                user.email = email

        if changes.password is not None:
            if not user.auth_mode.has_password():
                raise ValidationError("Las cuentas de Google no tienen contraseña")
            user.password_hash = self.hasher.hash(validate_password(changes.password))

        self._commit()
        self.db.refresh(user)
        logger.info(f"Updated user {user.id}")
        return user

    def delete(self, user_id: str) -> User:
        """Delete a user and return the removed record."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError()
        self.db.delete(user)
        self._commit()
        logger.info(f"Deleted user {user.id} ({user.email})")
        return user

    def _commit(self) -> None:
        """Commit, translating constraint violations into domain errors."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            detail = str(e.orig)
            # A concurrent writer won the race for the same unique value
            if "oauth_id" in detail:
                raise DuplicateOAuthIdError() from e
            if "email" in detail:
                raise DuplicateEmailError() from e
            logger.error(f"Integrity error while saving user: {detail}")
            raise InternalError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while saving user: {e}")
            raise InternalError() from e

    @contextmanager
    def _reading(self) -> Iterator[None]:
        """Translate read failures into InternalError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while reading users: {e}")
            raise InternalError() from e
