"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class DuplicateAccountError(AuthError):
    """An account with this email already exists."""

    def __init__(self, message: str = "An account with this email already exists"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """
    Email/password did not match an active account.

    Unknown email, inactive account and wrong password all raise this with
    the same message. The distinction only goes to the security log.
    """

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Token is malformed, badly signed, or past its expiry."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class SessionRevokedError(AuthError):
    """Session was signed out, superseded, or has expired server-side."""

    def __init__(self, message: str = "Session is no longer active"):
        super().__init__(message)


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class PermissionDeniedError(AuthError):
    """Authenticated, but the role does not allow this action."""

    def __init__(self, message: str = "Administrator access required"):
        super().__init__(message)
