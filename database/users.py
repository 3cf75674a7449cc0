"""
Credential store — user rows backed by the ``users`` table.

Uniqueness of username and email is enforced by the table's unique
indexes, not by a read-before-write, so concurrent signups cannot both
succeed.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User
from errors import DuplicateKey, StoreUnavailable

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None


class CredentialStore:
    def __init__(self, session: AsyncSession, case_insensitive: bool = False) -> None:
        self._session = session
        self._case_insensitive = case_insensitive

    def normalize_username(self, username: str) -> str:
        return username.lower() if self._case_insensitive else username

    async def find_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == self.normalize_username(username))
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed")
            raise StoreUnavailable() from exc
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        try:
            result = await self._session.execute(select(User).where(User.user_id == uid))
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed")
            raise StoreUnavailable() from exc
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        try:
            result = await self._session.execute(select(User).order_by(User.created_at))
        except SQLAlchemyError as exc:
            logger.exception("User listing failed")
            raise StoreUnavailable() from exc
        return list(result.scalars().all())

    async def insert(self, username: str, email: str, password_hash: str) -> User:
        """Persist a new user and commit; ``DuplicateKey`` on a unique-index clash."""
        user = User(
            user_id=uuid.uuid4(),
            username=self.normalize_username(username),
            email=email,
            password_hash=password_hash,
        )
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateKey(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("User insert failed")
            raise StoreUnavailable() from exc
        return user
