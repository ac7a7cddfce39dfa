"""bcrypt password hashing."""

import secrets

import bcrypt

# bcrypt ignores input past 72 bytes; longer passwords are truncated explicitly
_BCRYPT_MAX_BYTES = 72

# Verified against on the unknown-user path so response timing stays flat
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=12)).decode("ascii")


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """Return a bcrypt hash string for the password."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        return False


def burn_verify(password: str) -> None:
    """Run a full bcrypt check whose result is discarded."""
    verify_password(password, _DUMMY_HASH)


def generate_password(length: int = 16) -> str:
    """Random password for admin-provisioned accounts."""
    return secrets.token_urlsafe(length)[:length]
