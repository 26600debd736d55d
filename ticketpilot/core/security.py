"""
Authentication and security utilities.

User identity comes from an external auth provider, which mints a signed
bearer token for the signed-in user. This module signs and verifies those
tokens and provides helpers for handling stored secrets.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timezone
from typing import Optional

from ticketpilot.core.config import DEFAULT_SECRET_KEY, settings
from ticketpilot.core.exceptions import AuthenticationError, ConfigurationError


def generate_credential_id() -> str:
    """
    Generate a unique credential ID.

    Returns:
        A random 12-byte hex string prefixed with 'cred_'
    """
    return f"cred_{secrets.token_hex(12)}"


def generate_request_id() -> str:
    """
    Generate a unique request ID for tracing.

    Returns:
        A random 8-byte hex string prefixed with 'req_'
    """
    return f"req_{secrets.token_hex(8)}"


def check_secret_key() -> None:
    """
    Refuse to run in production with the built-in signing key.

    Raises:
        ConfigurationError: If SECURITY_SECRET_KEY was left at its default
    """
    if settings.is_production and settings.security.secret_key == DEFAULT_SECRET_KEY:
        raise ConfigurationError("SECURITY_SECRET_KEY must be set in production")


def _sign(message: str) -> str:
    return hmac.new(
        settings.security.secret_key.encode(),
        message.encode(),
        hashlib.sha256,
    ).hexdigest()


def create_user_token(user_id: str, timestamp: Optional[int] = None) -> str:
    """
    Create a signed bearer token for a user.

    Args:
        user_id: Identity assigned by the auth provider
        timestamp: Issue time (defaults to current time)

    Returns:
        Token of the form ``<user_id>.<timestamp>.<signature>``
    """
    if not user_id:
        raise ValueError("user_id must not be empty")
    if timestamp is None:
        timestamp = int(datetime.now(timezone.utc).timestamp())

    message = f"{user_id}.{timestamp}"
    return f"{message}.{_sign(message)}"


def verify_user_token(token: str, max_age_seconds: Optional[int] = None) -> str:
    """
    Verify a signed bearer token and return the user it identifies.

    Args:
        token: Token produced by create_user_token
        max_age_seconds: Maximum token age (defaults to the configured lifetime)

    Returns:
        The user ID

    Raises:
        AuthenticationError: If the token is malformed, tampered with or expired
    """
    if max_age_seconds is None:
        max_age_seconds = settings.security.token_max_age_seconds

    # User IDs may contain dots, so split from the right
    parts = token.rsplit(".", 2)
    if len(parts) != 3:
        raise AuthenticationError("Malformed token")

    user_id, raw_timestamp, signature = parts
    if not user_id or not raw_timestamp.isdigit():
        raise AuthenticationError("Malformed token")

    expected = _sign(f"{user_id}.{raw_timestamp}")
    if not hmac.compare_digest(signature, expected):
        raise AuthenticationError("Invalid token signature")

    current_time = int(datetime.now(timezone.utc).timestamp())
    if current_time - int(raw_timestamp) > max_age_seconds:
        raise AuthenticationError("Token expired")

    return user_id


def mask_secret(value: str, visible: int = 4) -> str:
    """
    Mask a secret for display, keeping only the last few characters.

    Args:
        value: The secret to mask
        visible: Number of trailing characters to keep

    Returns:
        Masked secret such as ``****abcd``
    """
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * 4 + value[-visible:]
