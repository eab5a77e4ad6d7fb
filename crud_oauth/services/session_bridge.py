"""Carries the authenticated principal across the OAuth redirect.

Only the user id is kept in the session. API endpoints never read it; they
authenticate with the bearer token instead.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

from starlette.responses import Response

from crud_oauth.models.user import User
from crud_oauth.services.users import UserStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


class SessionBridge:
    """Bind, resolve and tear down the session principal."""

    def __init__(self, cookie_name: str, https_only: bool = False, same_site: str = "lax"):
        self.cookie_name = cookie_name
        self.https_only = https_only
        self.same_site = same_site

    def bind(self, session: MutableMapping[str, Any], user: User) -> None:
        """Store the user id, discarding anything left from the handshake."""
        session.clear()
        session[SESSION_USER_KEY] = user.id
        logger.debug(f"Bound user {user.id} to session")

    def resolve(self, session: MutableMapping[str, Any], store: UserStore) -> User | None:
        """Look the session principal back up in the store."""
        user_id = session.get(SESSION_USER_KEY)
        if not user_id:
            return None
        user = store.find_by_id(str(user_id))
        if user is None:
            logger.info(f"Session referenced missing user {user_id}; clearing session")
            session.clear()
        return user

    def unbind(self, session: MutableMapping[str, Any], response: Response) -> None:
        """Drop the session entry and expire the client's session cookie."""
        session.clear()
        response.delete_cookie(
            self.cookie_name,
            path="/",
            secure=self.https_only,
            httponly=True,
            samesite=self.same_site,
        )
