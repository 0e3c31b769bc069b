"""
User persistence: lookups and inserts against the ``users`` table.

Driver and connection failures (including refused or dropped
connections, raised as ``OSError`` by asyncpg) surface as
``UserStoreError``.

Username uniqueness is guaranteed by the unique index, not by a
read-before-write: a losing concurrent insert surfaces as
``UsernameTakenError``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database.models import User
from database.session import Database

logger = logging.getLogger(__name__)


class UserStoreError(Exception):
    """The underlying database failed."""


class UsernameTakenError(UserStoreError):
    """Insert rejected by the unique index on ``username``."""

    def __init__(self, username: str) -> None:
        super().__init__(f"username already taken: {username}")
        self.username = username


class UserStore:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_username(self, username: str) -> Optional[User]:
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(User).where(User.username == username)
                )
                return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("User lookup failed for %s", username)
            raise UserStoreError(str(exc)) from exc

    async def get_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        try:
            uid = uuid.UUID(user_id) if isinstance(user_id, str) else user_id
        except ValueError:
            return None
        try:
            async with self._db.session() as session:
                return await session.get(User, uid)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("User lookup failed for id %s", uid)
            raise UserStoreError(str(exc)) from exc

    async def create(
        self,
        username: str,
        *,
        password_hash: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        """Insert a new user and return it with its generated id."""
        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            name=name,
        )
        try:
            async with self._db.session() as session:
                session.add(user)
                await session.flush()
        except IntegrityError as exc:
            raise UsernameTakenError(username) from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("User insert failed for %s", username)
            raise UserStoreError(str(exc)) from exc
        return user
