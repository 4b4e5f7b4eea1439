"""Registration, login and logout.

The acting user is identified by the session token the client presents; an
absent, revoked or expired token means the client is anonymous.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core import security, sessions
from core.exceptions import ValidationError, ConflictError, DuplicateError, AuthError, UnauthenticatedError
from db import repository
from db.models import User
from schemas.users import UserCreate, UserLogin

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid username or password."


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


async def register(db: AsyncSession, form: UserCreate) -> User:
    """Creates an account. Does not log the new user in.

    Raises
    ------
    ValidationError
        A field is missing, the passwords differ, or the password is too short.
    ConflictError
        The username or email is already registered.
    """
    if any(_blank(v) for v in (form.username, form.email, form.password, form.confirm_password)):
        raise ValidationError("All fields are required.")
    if form.password != form.confirm_password:
        raise ValidationError("Passwords do not match.")
    if len(form.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

    username = form.username.strip()
    email = form.email.strip()

    if await repository.find_by_username_or_email(db, username, email) is not None:
        raise ConflictError("Username or Email already exists.")

    password_hash = await security.hash_password_async(form.password)
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        phone=None,
        farm_area=None,
        pincode=None,
        crop_history=[],
    )
    try:
        user = await repository.insert(db, user)
    except DuplicateError as e:
        raise ConflictError(e.message)

    logger.info("New user registered: username=%s email=%s", user.username, user.email)
    return user


async def login(db: AsyncSession, form: UserLogin) -> str:
    """Checks credentials and opens a session. Returns the session token."""
    if _blank(form.username) or _blank(form.password):
        raise ValidationError("Username and password are required.")

    username = form.username.strip()
    logger.info("Attempting login for: %s", username)

    user = await repository.find_by_username(db, username)
    if user is None:
        logger.info("Login failed: unknown user %s", username)
        raise AuthError(INVALID_CREDENTIALS)

    if not await security.verify_password_async(form.password, user.password_hash):
        logger.info("Login failed: incorrect password for user %s", username)
        raise AuthError(INVALID_CREDENTIALS)

    token = await sessions.create_session(db, user.username)
    logger.info("Login successful for user: %s", username)
    return token


async def logout(db: AsyncSession, token: Optional[str]) -> None:
    await sessions.clear_session(db, token)
    logger.info("User logged out.")


async def resolve_current_user(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    username = await sessions.get_session_username(db, token)
    if username is None:
        return None
    return await repository.find_by_username(db, username)


async def require_current_user(db: AsyncSession, token: Optional[str]) -> User:
    user = await resolve_current_user(db, token)
    if user is None:
        raise UnauthenticatedError("You need to be logged in to view your profile.")
    return user
