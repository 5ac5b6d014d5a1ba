"""
Authentication helpers: password hashing, JWT issuance and verification.
"""

import os
import logging
from datetime import timedelta
from typing import Optional, Dict

import bcrypt
from dotenv import load_dotenv
from jose import JWTError, jwt

from agentsport.utils.datetime_utils import utcnow

load_dotenv()

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "agentsport-dev-secret-change-me")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "agentsport-dev-refresh-secret-change-me")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRATION_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRATION_MINUTES", "1440"))
REFRESH_TOKEN_EXPIRATION_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRATION_DAYS", "7"))


def normalize_email(email: str) -> str:
    """
    Normalize an email address for storage and lookup.

    Raises:
        ValueError: If the email is empty or has no ``@``
    """
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ValueError("A valid email address is required")
    return email


def hash_password(password: str) -> str:
    """Hash a plain password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain password against a bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode(), password_hash.encode())
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _encode(data: Dict, secret: str, expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": utcnow() + expires_delta, "type": token_type})
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    return jwt.encode(to_encode, secret, algorithm=JWT_ALGORITHM)


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to embed (``sub`` is stringified)
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRATION_MINUTES
    """
    return _encode(
        data,
        JWT_SECRET,
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRATION_MINUTES),
        "access",
    )


def create_refresh_token(data: Dict) -> str:
    """Create a signed refresh token carrying the same identity claims."""
    return _encode(
        data,
        JWT_REFRESH_SECRET,
        timedelta(days=REFRESH_TOKEN_EXPIRATION_DAYS),
        "refresh",
    )


def verify_token(token: str, refresh: bool = False) -> Optional[Dict]:
    """
    Decode and validate a token.

    Returns:
        Claims dict with ``user_id`` added (int), or None if the token is
        invalid, expired, or of the wrong type
    """
    secret = JWT_REFRESH_SECRET if refresh else JWT_SECRET
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None

    expected_type = "refresh" if refresh else "access"
    if payload.get("type") != expected_type:
        return None
    try:
        payload["user_id"] = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return payload


def build_token_claims(user: Dict, profile: Optional[Dict] = None) -> Dict:
    """
    Claims for a user's tokens, enriched with the id of their role profile.

    Args:
        user: User dict (``id``, ``email``, ``role``)
        profile: Role profile ids: ``agent_id``/``agent_slug`` for agents,
            ``player_id`` for players, ``club_id`` for clubs

    Returns:
        Claims dict
    """
    claims = {"sub": user["id"], "email": user["email"], "role": user["role"]}
    profile = profile or {}
    role = user["role"]
    if role == "agent":
        claims["agent_id"] = profile.get("agent_id")
        claims["agent_slug"] = profile.get("agent_slug")
    elif role == "player":
        claims["player_id"] = profile.get("player_id")
    elif role == "club":
        claims["club_id"] = profile.get("club_id")
    return claims
