"""Domain errors raised by services and translated at the HTTP boundary."""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a short client message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Error interno del servidor"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Datos inválidos"


class DuplicateEmailError(AppError):
    """Another user already owns this email.

    Distinct from ValidationError; both surface as 400.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "El correo ya está registrado"


class DuplicateOAuthIdError(AppError):
    """Another user is already linked to this provider identity."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "La cuenta de Google ya está vinculada"


class AuthenticationError(AppError):
    """Bad credentials or bad bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Correo o contraseña incorrectos"


class MissingTokenError(AuthenticationError):
    default_message = "Token no proporcionado. Usa: Authorization: Bearer <token>"


class TokenExpiredError(AuthenticationError):
    default_message = "Token expirado"


class InvalidSignatureError(AuthenticationError):
    default_message = "Token inválido"


class MalformedTokenError(AuthenticationError):
    default_message = "Token inválido"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Usuario no encontrado"


class ProviderError(AppError):
    """The identity provider could not authenticate the user.

    Never rendered as an HTTP error; the OAuth callback redirects instead.
    ``reason`` is the short code placed in the redirect query string.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Error de autenticación con Google"

    def __init__(self, message: str | None = None, reason: str = "provider_error"):
        super().__init__(message)
        self.reason = reason


class InternalError(AppError):
    """Unexpected store, hash or session failure."""
