"""
Identity service — pure business logic for authentication.

Rules:
  - Zero FastAPI imports beyond the domain exceptions.
  - Zero direct DB driver calls — only SQLAlchemy async session.
  - All I/O functions are async def.
  - No side effects beyond the session passed in (no global state mutated).
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from thesync.auth.constants import LoginFailure
from thesync.auth.models import Admin, User
from thesync.auth.utils import hash_password, verify_password
from thesync.config import Settings
from thesync.exceptions import (
    CurrentPasswordIncorrect,
    NotAuthorized,
    SamePassword,
    UserNotFound,
)
from thesync_shared.auth.tokens import issue_token
from thesync_shared.constants import Role

logger = logging.getLogger(__name__)


# ── Principal queries ─────────────────────────────────────────────────────────

async def get_admin_by_username(session: AsyncSession, username: str) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.username == username))
    return result.scalar_one_or_none()


async def get_admin_by_id(session: AsyncSession, admin_id: uuid.UUID) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.id == admin_id))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    # Case-insensitive so reset requests typed in a different case still match.
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_active_user_by_email(session: AsyncSession, email: str) -> User:
    """Raise UserNotFound (404) unless an active user owns this email."""
    user = await get_user_by_email(session, email)
    if user is None or not user.is_active:
        logger.warning("No active user for email %s", email)
        raise UserNotFound()
    return user


# ── Tokens ────────────────────────────────────────────────────────────────────

def issue_access_token(
    principal_id: uuid.UUID,
    role: Role,
    identifier: str,
    settings: Settings,
) -> str:
    return issue_token(
        sub=str(principal_id),
        role=role,
        identifier=identifier,
        secret=settings.jwt_access_secret,
        algorithm=settings.jwt_algorithm,
        expire_seconds=settings.jwt_access_expire_seconds,
    )


def issue_refresh_token(
    principal_id: uuid.UUID,
    role: Role,
    identifier: str,
    settings: Settings,
) -> str:
    return issue_token(
        sub=str(principal_id),
        role=role,
        identifier=identifier,
        secret=settings.jwt_refresh_secret,
        algorithm=settings.jwt_algorithm,
        expire_seconds=settings.jwt_refresh_expire_seconds,
    )


# ── Role resolution ───────────────────────────────────────────────────────────

def resolve_role(user: User) -> Role | None:
    """
    Derive a user's role from their profile rows.

    Lecturer with the moderator flag → MODERATOR, lecturer → LECTURER,
    student → STUDENT.  A user with neither profile has no role.
    """
    if user.lecturer is not None:
        return Role.MODERATOR if user.lecturer.is_moderator else Role.LECTURER
    if user.student is not None:
        return Role.STUDENT
    return None


# ── Credential checks ─────────────────────────────────────────────────────────

async def authenticate_admin(session: AsyncSession, username: str, password: str) -> Admin:
    """
    Verify admin credentials.

    Unknown username and wrong password raise the same NotAuthorized so the
    response does not reveal which usernames exist.
    """
    admin = await get_admin_by_username(session, username)
    if admin is None:
        logger.warning("Admin %s not found", username)
        raise NotAuthorized(LoginFailure.NOT_FOUND)
    if not verify_password(password, admin.password_hash):
        logger.warning("Invalid password for admin %s", username)
        raise NotAuthorized(LoginFailure.WRONG_PASSWORD)
    return admin


async def authenticate_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, Role]:
    """Verify user credentials and resolve the role in one step."""
    user = await get_user_by_email(session, email)
    if user is None:
        logger.warning("User %s not found", email)
        raise NotAuthorized(LoginFailure.NOT_FOUND)
    if not user.is_active:
        logger.warning("User %s is inactive", email)
        raise NotAuthorized(LoginFailure.INACTIVE)
    if not verify_password(password, user.password_hash):
        logger.warning("Invalid password for user %s", email)
        raise NotAuthorized(LoginFailure.WRONG_PASSWORD)

    role = resolve_role(user)
    if role is None:
        logger.warning("User %s has neither a lecturer nor a student profile", email)
        raise NotAuthorized(LoginFailure.ROLE_NOT_FOUND)
    return user, role


# ── Password updates ──────────────────────────────────────────────────────────

async def update_password(session: AsyncSession, user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    await session.flush()
    logger.info("Password updated for user %s", user.id)


async def change_user_password(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    current_password: str,
    new_password: str,
) -> None:
    """
    Replace the password after confirming the current one.

    Raises:
      UserNotFound             — the user id from the token no longer exists
      SamePassword             — new password equals the current one
      CurrentPasswordIncorrect — current password does not verify
    """
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise UserNotFound()
    if current_password == new_password:
        raise SamePassword()
    if not verify_password(current_password, user.password_hash):
        logger.warning("Invalid current password for user %s", user_id)
        raise CurrentPasswordIncorrect()
    await update_password(session, user, new_password)
