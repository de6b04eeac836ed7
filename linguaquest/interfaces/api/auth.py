"""
Session authentication.

Validates the signed session data issued by the account service, using
HMAC-SHA256 over the sorted key=value pairs (same scheme as Telegram
WebApp initData, with our own secret).
"""

import hashlib
import hmac
import json
import time
import urllib.parse
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from linguaquest.config import config

SESSION_KEY_SALT = b"LinguaQuestSession"


@dataclass
class SessionUser:
    """Validated user from session data."""

    id: int
    email: str
    name: str | None = None


def _secret_key(secret: str) -> bytes:
    return hmac.new(SESSION_KEY_SALT, secret.encode("utf-8"), hashlib.sha256).digest()


def _data_check_string(data: dict) -> str:
    return "\n".join(f"{k}={v}" for k, v in sorted(data.items()) if v is not None)


def sign_session_data(data: dict[str, str], secret: str) -> str:
    """
    Build a signed session string (used by the account service and tests).

    Args:
        data: Flat key -> string value mapping (e.g. user JSON, auth_date)
        secret: Shared SECRET_KEY

    Returns:
        URL-encoded data with a trailing hash parameter
    """
    signature = hmac.new(
        _secret_key(secret), _data_check_string(data).encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return urllib.parse.urlencode({**data, "hash": signature})


def validate_session_data(
    session_data: str, secret: str, max_age_seconds: int | None = None
) -> dict | None:
    """
    Validate signed session data.

    Returns:
        Parsed data dict if valid (and not expired), None otherwise
    """
    if not session_data:
        return None

    try:
        parsed = urllib.parse.parse_qs(session_data, keep_blank_values=True)
        data = {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}
    except ValueError:
        return None

    received_hash = data.pop("hash", None)
    if not received_hash or not isinstance(received_hash, str):
        return None

    expected_hash = hmac.new(
        _secret_key(secret), _data_check_string(data).encode("utf-8"), hashlib.sha256
    ).hexdigest()

    # Constant-time comparison
    if not hmac.compare_digest(expected_hash, received_hash):
        return None

    if max_age_seconds is not None:
        try:
            auth_date = int(data.get("auth_date", 0))
        except (TypeError, ValueError):
            return None
        if time.time() - auth_date > max_age_seconds:
            return None

    return data


def parse_session_user(data: dict) -> SessionUser | None:
    """Parse the user object from validated session data."""
    user_json = data.get("user")
    if not user_json:
        return None

    try:
        user_data = json.loads(user_json)
        return SessionUser(
            id=int(user_data["id"]),
            email=user_data["email"],
            name=user_data.get("name"),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
        return None


async def get_current_user(request: Request) -> SessionUser:
    """
    FastAPI dependency for authenticated endpoints.

    Expects header: Authorization: session <data>

    Raises:
        HTTPException 401 if auth fails
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
        )

    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "session":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization format. Expected: session <data>",
        )

    validated_data = validate_session_data(
        parts[1],
        config.SECRET_KEY.get_secret_value(),
        max_age_seconds=config.SESSION_MAX_AGE_SECONDS,
    )
    if not validated_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    user = parse_session_user(validated_data)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User data not found in session",
        )

    return user
