"""Per-client sessions.

Each login gets its own signed token whose ``jti`` is recorded in the
``user_sessions`` table. A token only resolves to a user while its row exists
and has not expired, so logout can revoke it.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from core import security
from db.models import UserSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # SQLite stores naive datetimes; keep everything in naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def create_session(db: AsyncSession, username: str, lifetime: Optional[timedelta] = None) -> str:
    if lifetime is None:
        lifetime = timedelta(minutes=security.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = _utcnow()
    token = security.create_access_token({"sub": username}, expires_delta=lifetime)
    claims = security.decode_access_token(token, verify_exp=False)

    # sessions that were never logged out and never presented again
    await db.execute(delete(UserSession).where(UserSession.expires_at <= now))
    db.add(UserSession(token_id=claims["jti"], username=username, expires_at=now + lifetime))
    await db.commit()
    return token


async def get_session_username(db: AsyncSession, token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    # the row's expires_at decides, so an expired token can still find and drop its row
    claims = security.decode_access_token(token, verify_exp=False)
    if not claims or "jti" not in claims:
        return None

    record = await db.get(UserSession, claims["jti"])
    if record is None:
        return None
    if record.expires_at <= _utcnow():
        logger.debug("Dropping expired session for %s", record.username)
        await db.delete(record)
        await db.commit()
        return None
    if record.username != claims.get("sub"):
        return None
    return record.username


async def clear_session(db: AsyncSession, token: Optional[str]) -> None:
    if not token:
        return
    # an expired token still names the row it should remove
    claims = security.decode_access_token(token, verify_exp=False)
    token_id = claims.get("jti") if claims else None
    if not token_id:
        return
    await db.execute(delete(UserSession).where(UserSession.token_id == token_id))
    await db.commit()
