"""
Email gateway client for account notification emails.

Uses HMAC-SHA256 signature for request authentication. The gateway owns the
templates; this client only sends a typed payload.
"""

import hashlib
import hmac
import json
import logging
from datetime import datetime

import requests

logger = logging.getLogger(__name__)


class EmailGatewayError(Exception):
    """Raised when email gateway request fails."""


class EmailGatewayClient:
    """Send emails via HTTP gateway with HMAC signature verification."""

    def __init__(self, gateway_url: str, api_key: str, hmac_secret: str, timeout_seconds: int = 10):
        """
        Initialize with gateway credentials.

        Raises:
            ValueError: If any credential is empty
        """
        if not gateway_url:
            raise ValueError("gateway_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        if not hmac_secret:
            raise ValueError("hmac_secret is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.timeout_seconds = timeout_seconds

    def _sign(self, body: str) -> str:
        return hmac.new(self.hmac_secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()

    def _sign_and_send(self, payload: dict) -> None:
        """
        POST the compact JSON payload with its signature in X-Signature.

        Raises:
            EmailGatewayError: Transport failure, unreadable reply, or a
                reply without success=true
        """
        body = json.dumps(payload, separators=(",", ":"))
        try:
            response = requests.post(
                self.gateway_url,
                data=body,
                headers={
                    "Content-Type": "application/json",
                    "X-API-Key": self.api_key,
                    "X-Signature": self._sign(body),
                },
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            logger.error("Email gateway unreachable (%s): %s", payload["type"], e)
            raise EmailGatewayError(f"Connection failed: {e}") from e

        try:
            reply = response.json()
        except ValueError:
            logger.error("Email gateway returned non-JSON reply, status %s", response.status_code)
            raise EmailGatewayError("Invalid response from gateway")

        if response.status_code == 200 and reply.get("success"):
            return
        message = reply.get("message", "Unknown error")
        logger.error("Email gateway rejected %s: %s", payload["type"], message)
        raise EmailGatewayError(f"Gateway error: {message}")

    def send_welcome(self, email: str, display_name: str, app_url: str) -> None:
        """
        Send the account-created email.

        Raises:
            EmailGatewayError: On any failure
        """
        self._sign_and_send({
            "type": "welcome",
            "email": email,
            "display_name": display_name,
            "app_url": app_url,
        })
        logger.info("Welcome email sent to %s", email)

    def send_login_notification(
        self,
        email: str,
        display_name: str,
        ip_address: str | None,
        user_agent: str | None,
        signed_in_at: datetime,
    ) -> None:
        """
        Tell the account owner about a new sign-in.

        Raises:
            EmailGatewayError: On any failure
        """
        self._sign_and_send({
            "type": "login_notification",
            "email": email,
            "display_name": display_name,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "signed_in_at": signed_in_at.isoformat(),
        })
        logger.info("Login notification sent to %s", email)
