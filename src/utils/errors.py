# failure kinds surfaced to callers of the storefront api
from datetime import timedelta


class StorefrontError(Exception):
    """
    Base class of every expected failure.

    ``kind`` is a stable discriminator the UI can branch on,
    ``str(err)`` is the message meant for the user.
    """

    kind = "error"
    default_message = "Operation failed."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)


class NotFoundError(StorefrontError):
    kind = "not_found"
    default_message = "Not found."


class ConflictError(StorefrontError):
    kind = "conflict"
    default_message = "User already exists."


class InvalidCredentialError(StorefrontError):
    kind = "invalid_credential"
    default_message = "Invalid credentials."


class ThrottledError(StorefrontError):
    kind = "throttled"
    default_message = "Too many attempts. Please wait before trying again."

    def __init__(self, retry_after: timedelta, message: str = ""):
        super().__init__(message)
        self.retry_after = retry_after


class InvalidOrExpiredTokenError(StorefrontError):
    kind = "invalid_or_expired_token"
    default_message = "Invalid, expired or already used code."


class MissingChannelError(StorefrontError):
    kind = "missing_channel"
    default_message = "No phone registered for this user. Try email instead."
