"""Account and session service.

Flow:
1. Sign-up creates a User (bcrypt password hash) and its Profile in one transaction
2. Sign-in verifies the hash and issues an opaque session token with expiry
3. Each request resolves the token back to a CurrentUser; expired sessions are deleted
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import secrets

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from green_community.models import Profile, User, UserSession
from green_community.services.errors import AuthError, ConflictError
from green_community.settings import get_settings
from green_community.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller resolved from a session token."""

    user_id: str
    email: str
    eco_name: str


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (salt embedded in the result)."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def session_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a session issued at `now`."""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=get_settings().session_ttl_days)


async def sign_up(
    *,
    email: str,
    password: str,
    eco_name: str,
    full_name: str | None = None,
) -> Profile:
    """Create an account and its profile.

    Raises:
        ConflictError: If the email is already registered.
    """
    async with get_session() as session:
        existing = await session.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Email is already registered", code="EMAIL_TAKEN")

        user = User(email=email, password_hash=hash_password(password))
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as e:
            raise ConflictError("Email is already registered", code="EMAIL_TAKEN") from e

        profile = Profile(
            user_id=user.id,
            eco_name=eco_name,
            full_name=full_name,
            green_points=0,
        )
        session.add(profile)
        await session.flush()
        await session.refresh(profile)

    logger.info(f"[auth] signed up user_id={user.id}")
    return profile


async def sign_in(*, email: str, password: str) -> tuple[str, datetime, Profile]:
    """Verify credentials and issue a session.

    Returns:
        (token, expires_at, profile)

    Raises:
        AuthError: On unknown email or wrong password.
    """
    async with get_session() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password", code="INVALID_CREDENTIALS")

        profile_result = await session.execute(select(Profile).where(Profile.user_id == user.id))
        profile = profile_result.scalar_one()

        token = new_session_token()
        expires_at = session_expiry()
        session.add(UserSession(token=token, user_id=user.id, expires_at=expires_at))

    logger.info(f"[auth] signed in user_id={user.id}")
    return token, expires_at, profile


async def sign_out(token: str) -> None:
    """Delete the session behind a token (no-op if unknown)."""
    async with get_session() as session:
        await session.execute(delete(UserSession).where(UserSession.token == token))


async def resolve_session(token: str) -> CurrentUser:
    """Resolve a session token to the current user.

    Raises:
        AuthError: If the token is unknown or expired.
    """
    async with get_session() as session:
        result = await session.execute(
            select(UserSession, User, Profile)
            .join(User, User.id == UserSession.user_id)
            .join(Profile, Profile.user_id == User.id)
            .where(UserSession.token == token)
        )
        row = result.first()
        if row is None:
            raise AuthError("Not authenticated")

        user_session, user, profile = row
        if user_session.expires_at < datetime.now(timezone.utc):
            await session.delete(user_session)
            await session.commit()
            raise AuthError("Session expired", code="SESSION_EXPIRED")

        return CurrentUser(user_id=user.id, email=user.email, eco_name=profile.eco_name)
