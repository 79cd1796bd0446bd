"""
JWT helpers for staff authentication
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)


def create_jwt_token(
    staff_id: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a staff JWT

    Args:
        staff_id: Staff document id, stored as the ``sub`` claim
        expires_delta: Token lifetime (defaults to one hour)
        extra_claims: Additional claims to include

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = dict(extra_claims or {})
    payload.update({
        "sub": staff_id,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
    })

    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT token

    Returns:
        Decoded payload or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        logger.warning("JWT token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
        return None
