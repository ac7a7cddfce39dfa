"""Propagate the authenticated identity through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Identity:
    """Who is making the current request, as asserted by verified token claims."""

    user_id: UUID
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


_current_identity: ContextVar[Identity | None] = ContextVar("current_identity", default=None)


def get_current_identity() -> Identity | None:
    """Identity for the current request, or None outside an authenticated request."""
    return _current_identity.get()


def get_current_user_id() -> UUID:
    """
    Get current user ID from context.

    Raises RuntimeError if no identity is set.
    This is fail-fast behavior - if you're in a code path that
    requires user context and it's not set, that's a bug.
    """
    identity = _current_identity.get()
    if identity is None:
        raise RuntimeError(
            "No user context set. This usually means you're calling "
            "user-scoped code outside of an authenticated request."
        )
    return identity.user_id


def set_current_identity(identity: Identity) -> None:
    """
    Set current identity in context.

    Called by auth middleware after validating the session token.
    """
    _current_identity.set(identity)


def clear_current_identity() -> None:
    """
    Clear identity context.

    Must be called in a finally block to prevent context leakage.
    """
    _current_identity.set(None)


@contextmanager
def identity_context(identity: Identity):
    """
    Temporarily act as the given identity.

    Useful for tests, scripts and admin operations on behalf of a user.
    """
    previous = _current_identity.get()
    set_current_identity(identity)
    try:
        yield identity
    finally:
        if previous is None:
            clear_current_identity()
        else:
            set_current_identity(previous)
