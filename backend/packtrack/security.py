"""
PackTrack Backend — Password Hashing & Session Tokens
======================================================

What:  bcrypt password hashing (passlib) and HS256 session tokens
       (python-jose).

Token claims:
    {"sub": "<user id>", "id": "<user id>", "fullName": "...", "role": "USER|ADMIN",
     "exp": <now + token_expire_days>}
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from packtrack.config import settings
from packtrack.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignores everything after 72 bytes; truncate explicitly so hashing
# and verification always see the same input.
BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_bcrypt_input(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(_bcrypt_input(plain_password), hashed_password)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Password verification failed: unrecognized hash format")
        return False


def create_access_token(
    full_name: str,
    user_id: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.token_expire_days)
    )
    to_encode = {
        "sub": user_id,
        "id": user_id,
        "fullName": full_name,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError for bad signatures, malformed tokens and expired tokens.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.info("Token rejected: %s", str(e))
        raise UnauthorizedError(message="Invalid or expired token")

    if not payload.get("id"):
        raise UnauthorizedError(message="Invalid token payload")
    return payload
