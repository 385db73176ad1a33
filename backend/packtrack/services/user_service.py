"""
PackTrack Backend — User Service
=================================

What:  Registration, login and per-user CRUD.
How:   Same shape as PackagingService: holds the request's AsyncSession,
       flushes instead of committing, raises PackTrackError subclasses.

Login deliberately raises the same InvalidCredentialsError for an unknown
email and for a wrong password.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packtrack.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
)
from packtrack.models.user import User
from packtrack.schemas.user import (
    AuthResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from packtrack.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _flush(self, operation: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Unique email raced past the pre-check
            logger.warning("Integrity error during %s: %s", operation, str(e.orig))
            raise ConflictError(message="Email already in use")
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(context={"operation": operation})

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _require_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    @staticmethod
    def _auth_response(user: User) -> AuthResponse:
        token = create_access_token(
            full_name=user.full_name,
            user_id=str(user.id),
            role=user.role.value,
        )
        return AuthResponse(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            token=token,
        )

    async def register(self, data: UserRegister) -> AuthResponse:
        """
        Create an account and return it with a fresh session token.

        Raises:
            ConflictError: email already registered (→ 409)
        """
        if await self.get_by_email(data.email) is not None:
            logger.info("Registration rejected: email already in use")
            raise ConflictError(message="Email already in use")

        user = User(
            full_name=data.full_name,
            email=data.email,
            password=get_password_hash(data.password),
        )
        self.db.add(user)
        await self._flush("register")

        logger.info("User registered: %s", user.id)
        return self._auth_response(user)

    async def login(self, data: UserLogin) -> AuthResponse:
        """
        Raises:
            InvalidCredentialsError: unknown email or wrong password (→ 400)
        """
        user = await self.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.password):
            logger.info("Login failed")
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.id)
        return self._auth_response(user)

    async def get_user(self, user_id: uuid.UUID) -> UserResponse:
        return UserResponse.model_validate(await self._require_user(user_id))

    async def list_users(self) -> List[UserResponse]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return [UserResponse.model_validate(user) for user in result.scalars().all()]

    async def update_user(self, user_id: uuid.UUID, data: UserUpdate) -> UserResponse:
        """
        Apply the supplied fields; a new password is rehashed.

        Raises:
            NotFoundError: unknown user (→ 404)
            ConflictError: new email belongs to another user (→ 409)
        """
        user = await self._require_user(user_id)

        if data.email is not None and data.email != user.email:
            other = await self.get_by_email(data.email)
            if other is not None and other.id != user.id:
                raise ConflictError(message="Email already in use")
            user.email = data.email

        if data.full_name is not None:
            user.full_name = data.full_name

        if data.password is not None:
            user.password = get_password_hash(data.password)

        await self._flush("update_user")

        logger.info("User updated: %s", user.id)
        return UserResponse.model_validate(user)

    async def delete_user(self, user_id: uuid.UUID) -> None:
        user = await self._require_user(user_id)
        await self.db.delete(user)
        await self._flush("delete_user")
        logger.info("User deleted: %s", user_id)
