"""
Valkey (Redis-compatible) client for sign-in throttling counters.

Simple wrapper around redis-py. Connection URL from env or Vault.
Fail-fast: connection failures raise StorageUnavailableError, never a
fallback value.
"""

import logging
from contextlib import contextmanager

import redis

from core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors():
    try:
        yield
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.error("Valkey unavailable: %s", e)
        raise StorageUnavailableError() from e


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        count = client.incr("signin:alice@example.com")
        client.expire("signin:alice@example.com", 900)
    """

    def __init__(self, url: str, timeout_seconds: int = 5):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)
            timeout_seconds: Socket connect/read timeout

        Raises:
            StorageUnavailableError: If connection fails
        """
        self._client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        # Verify connectivity immediately (fail-fast)
        self.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """Health check. Raises StorageUnavailableError if unreachable."""
        with _translate_errors():
            self._client.ping()
        return True

    def delete(self, key: str) -> bool:
        """Delete key. Returns True if key existed."""
        with _translate_errors():
            return self._client.delete(key) > 0

    def incr(self, key: str) -> int:
        """Increment key by 1, creating it at 1. Returns the new value."""
        with _translate_errors():
            return self._client.incr(key)

    def expire(self, key: str, seconds: int) -> bool:
        """Set (or reset) a key's TTL."""
        with _translate_errors():
            return bool(self._client.expire(key, seconds))

    def ttl(self, key: str) -> int:
        """
        Get remaining TTL in seconds.

        Returns:
            -2 if key doesn't exist
            -1 if key has no expiration
            Positive int: remaining seconds
        """
        with _translate_errors():
            return self._client.ttl(key)

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
