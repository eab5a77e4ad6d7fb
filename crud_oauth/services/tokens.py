"""Bearer token issuance and verification."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from crud_oauth.errors import InvalidSignatureError, MalformedTokenError, TokenExpiredError


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified token."""

    user_id: str
    email: str


class TokenService:
    """Signs and validates HS256 JWTs with a server-held secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiration_minutes: int = 10080):
        self.secret = secret
        self.algorithm = algorithm
        self.lifetime = timedelta(minutes=expiration_minutes)

    def issue(self, user_id: str, email: str, now: datetime | None = None) -> str:
        """Create a JWT access token valid for the configured window."""
        issued_at = now or datetime.now(UTC)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a JWT token.

        Raises MalformedTokenError when the token is not a JWT at all,
        TokenExpiredError when it is past its window and
        InvalidSignatureError for any other rejection.
        """
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise MalformedTokenError() from e

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise InvalidSignatureError() from e

        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            raise MalformedTokenError()
        return TokenClaims(user_id=str(user_id), email=str(email))
