"""
Secret resolution: environment first, HashiCorp Vault second.

Local development sets DATABASE_URL / JWT_SECRET / ... directly (or via .env).
Deployed environments set VAULT_ADDR + AppRole credentials and keep secrets
under the 'salescrm/' KV v2 prefix. All paths are scoped to that prefix.
"""

import os
import logging
from typing import Dict

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

# Project scope - all secrets under this path
_SECRET_PREFIX = "salescrm"

# Singleton instance and cache
_vault_client_instance: "VaultClient | None" = None
_secret_cache: Dict[str, str] = {}


def _ensure_vault_client() -> "VaultClient":
    global _vault_client_instance
    if _vault_client_instance is None:
        _vault_client_instance = VaultClient()
    return _vault_client_instance


def vault_configured() -> bool:
    """Whether Vault should be consulted for secrets missing from the environment."""
    return bool(os.getenv("VAULT_ADDR"))


class VaultClient:
    """
    KV v2 reader authenticated with AppRole.

    Construction logs in immediately, so a bad address or bad credentials
    fail at startup rather than on the first secret lookup.
    """

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_namespace: str | None = None,
        role_id: str | None = None,
        secret_id: str | None = None,
    ):
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        role_id = role_id or os.getenv("VAULT_ROLE_ID")
        secret_id = secret_id or os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")
        if not (role_id and secret_id):
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        self.client = hvac.Client(url=self.vault_addr, namespace=self.vault_namespace)
        self._login(role_id, secret_id)
        logger.info("Vault client initialized: %s", self.vault_addr)

    def _login(self, role_id: str, secret_id: str) -> None:
        """
        Raises:
            PermissionError: AppRole login rejected or no usable token issued
        """
        try:
            result = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
            self.client.token = result["auth"]["client_token"]
        except (hvac.exceptions.VaultError, KeyError) as e:
            logger.error("AppRole authentication failed: %s", e)
            raise PermissionError(f"AppRole authentication failed: {e}") from e

        if not self.client.is_authenticated():
            raise PermissionError("AppRole authentication failed: token not accepted")

    def get_secret(self, path: str, field: str) -> str:
        """
        One field of the KV v2 secret at salescrm/<path>.

        Raises:
            PermissionError: Path missing or not readable with this role
            KeyError: Secret exists but has no such field
        """
        full_path = f"{_SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath as e:
            logger.error("Secret path not found: %s", full_path)
            raise PermissionError(f"Secret path '{full_path}' not found in Vault") from e
        except (Unauthorized, Forbidden) as e:
            logger.error("Access denied to secret %s", full_path)
            raise PermissionError(f"Access denied to secret '{full_path}'") from e

        data = response["data"]["data"]
        try:
            return data[field]
        except KeyError:
            raise KeyError(
                f"Field '{field}' not found in secret '{full_path}'. Available: {', '.join(data)}"
            ) from None


def resolve_secret(env_var: str, path: str, field: str) -> str | None:
    """
    Look up a secret: environment variable, then Vault (if configured).

    Returns None when neither source has it.
    """
    value = os.getenv(env_var)
    if value:
        return value

    if not vault_configured():
        return None

    cache_key = f"{_SECRET_PREFIX}/{path}/{field}"
    if cache_key in _secret_cache:
        return _secret_cache[cache_key]

    value = _ensure_vault_client().get_secret(path, field)
    _secret_cache[cache_key] = value
    return value


# Convenience functions


def get_database_url() -> str | None:
    """Database connection URL (DATABASE_URL or salescrm/database:url)."""
    return resolve_secret("DATABASE_URL", "database", "url")


def get_jwt_secret() -> str | None:
    """Token signing key (JWT_SECRET or salescrm/auth:jwt_secret)."""
    return resolve_secret("JWT_SECRET", "auth", "jwt_secret")


def get_valkey_url() -> str | None:
    """Valkey URL for sign-in throttling (VALKEY_URL or salescrm/valkey:url)."""
    return resolve_secret("VALKEY_URL", "valkey", "url")


def get_email_config() -> Dict[str, str] | None:
    """
    Email gateway configuration, or None when no gateway is configured.

    Returns:
        Dict with keys: gateway_url, api_key, hmac_secret
    """
    fields = {
        "gateway_url": "EMAIL_GATEWAY_URL",
        "api_key": "EMAIL_API_KEY",
        "hmac_secret": "EMAIL_HMAC_SECRET",
    }
    result = {}
    for field, env_var in fields.items():
        value = resolve_secret(env_var, "email", field)
        if not value:
            return None
        result[field] = value
    return result
