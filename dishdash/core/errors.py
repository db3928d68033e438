class AuthError(Exception):
    """Base class for errors raised by the authentication subsystem."""


class ConfigError(AuthError):
    """A required setting is missing. Raised at startup, never per request."""


class DeliveryError(AuthError):
    """The mail relay did not accept the magic link for the recipient."""

    def __init__(self, message: str, rejected: tuple[str, ...] = ()):
        super().__init__(message)
        self.rejected = rejected


class VerificationError(AuthError):
    """A magic link could not be redeemed."""


class InvalidTokenError(VerificationError):
    pass


class ExpiredTokenError(VerificationError):
    pass


class StorageError(AuthError):
    """Persistence failure while reading or writing credentials."""
