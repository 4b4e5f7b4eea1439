"""Credential store: lookups and inserts over the ``users`` table.

There are deliberately no update or delete helpers; accounts are only ever
created through registration.
"""
import logging
from typing import Optional

from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateError
from db.models import User

logger = logging.getLogger(__name__)


async def find_by_username_or_email(db: AsyncSession, username: str, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email)).limit(1)
    )
    return result.scalar_one_or_none()


async def find_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def insert(db: AsyncSession, user: User) -> User:
    """Stores a new account.

    Raises
    ------
    DuplicateError
        If the username or the email is already taken. The check runs before
        the insert, and the unique indexes catch anything that slips past it.
    """
    if await find_by_username_or_email(db, user.username, user.email) is not None:
        raise DuplicateError("Username or Email already exists.")

    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Concurrent registration clash for username=%s", user.username)
        raise DuplicateError("Username or Email already exists.")
    await db.refresh(user)
    return user


async def count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()
