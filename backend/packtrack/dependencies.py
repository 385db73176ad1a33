"""
PackTrack Backend — Request Dependencies
=========================================

What:  FastAPI providers for services, the file store and the caller's
       identity.
How:   Every provider is a plain function used with Depends(), so tests can
       swap any of them through app.dependency_overrides. get_db_session is
       resolved once per request, which makes the services and the auth
       check share one session and one transaction.

Authentication:
    1. `Authorization: Bearer <token>` header
    2. otherwise the `token` cookie
    Missing, invalid or expired tokens, and tokens for users that no longer
    exist, raise UnauthorizedError (401).
"""

import logging
import uuid
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from packtrack.database import get_db_session
from packtrack.exceptions import ForbiddenError, UnauthorizedError
from packtrack.models.user import User, UserRole
from packtrack.security import decode_token
from packtrack.services.file_store import FileStore, file_store
from packtrack.services.packaging_service import PackagingService
from packtrack.services.user_service import UserService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# ── Services ──────────────────────────────────────────────────────────────


def get_file_store() -> FileStore:
    return file_store


def get_packaging_service(
    db: AsyncSession = Depends(get_db_session),
    store: FileStore = Depends(get_file_store),
) -> PackagingService:
    return PackagingService(db, store)


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    return UserService(db)


# ── Authentication ────────────────────────────────────────────────────────


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_cookie: Optional[str] = Cookie(None, alias="token"),
    users: UserService = Depends(get_user_service),
) -> User:
    token = credentials.credentials if credentials else token_cookie
    if not token:
        raise UnauthorizedError()

    payload = decode_token(token)
    try:
        user_id = uuid.UUID(str(payload["id"]))
    except ValueError:
        raise UnauthorizedError(message="Invalid token payload")

    user = await users.get_by_id(user_id)
    if user is None:
        logger.info("Token for unknown user %s rejected", user_id)
        raise UnauthorizedError(message="User no longer exists")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError(message="Admin access required")
    return current_user


def ensure_self_or_admin(current_user: User, user_id: uuid.UUID) -> None:
    """Per-user routes: callers may act on themselves; admins on anyone."""
    if current_user.id != user_id and current_user.role != UserRole.ADMIN:
        raise ForbiddenError(
            context={"caller": str(current_user.id), "target": str(user_id)}
        )
