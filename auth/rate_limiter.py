"""Per-email throttling of sign-in attempts, counted in Valkey.

Every attempt pushes the counter's expiry out by a full window, so a client
that keeps hammering stays locked out until it goes quiet for a window.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Sign-in attempt counter keyed by normalized email."""

    KEY_PREFIX = "ratelimit:signin:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._max_attempts = config.rate_limit_attempts
        self._window_seconds = config.rate_limit_window_minutes * 60

    def _key(self, email: str) -> str:
        return self.KEY_PREFIX + email.strip().lower()

    def record_attempt(self, email: str) -> None:
        """
        Count one attempt for this email.

        Raises:
            RateLimitedError: More than the allowed attempts inside the window
        """
        key = self._key(email)
        attempts = self._valkey.incr(key)
        self._valkey.expire(key, self._window_seconds)

        if attempts > self._max_attempts:
            raise RateLimitedError(retry_after_seconds=max(self._valkey.ttl(key), 1))

    def clear(self, email: str) -> None:
        """Forget the attempts for this email (after a successful sign-in)."""
        self._valkey.delete(self._key(email))
