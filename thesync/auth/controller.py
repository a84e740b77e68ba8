"""
Identity service — auth controller (request orchestration layer).

Responsibilities:
  - Receive validated input from the router.
  - Call service functions (which own business logic) and the session cache.
  - Compose and return the response model.

Every login writes a fresh session record holding the identifiers embedded
in the two tokens it returns.  A refresh token is honoured only while its
identifier still matches that record, so a later login or a logout makes
every earlier refresh token useless.
"""
from __future__ import annotations

import logging
import secrets
import time
import uuid

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from thesync.auth import cache
from thesync.auth.constants import OTP_TTL_SECONDS, RefreshFailure
from thesync.auth.schemas import (
    AdminLoginRequest,
    ChangePasswordRequest,
    LoginResponse,
    PasswordResetRequestSchema,
    PasswordResetVerifySchema,
    RefreshRequest,
    RefreshResponse,
    UserLoginRequest,
)
from thesync.auth.service import (
    authenticate_admin,
    authenticate_user,
    change_user_password,
    get_active_user_by_email,
    get_admin_by_id,
    get_user_by_id,
    issue_access_token,
    issue_refresh_token,
    resolve_role,
    update_password,
)
from thesync.auth.utils import generate_identifier, generate_otp, generate_strong_password
from thesync.config import Settings
from thesync.email.jobs import EmailJobType, queue_email
from thesync.exceptions import InvalidOTP, InvalidRefreshToken
from thesync_shared.auth.tokens import TokenPayload, TokenVerificationError, verify_token
from thesync_shared.constants import Role

logger = logging.getLogger(__name__)


# ── Helpers ───────────────────────────────────────────────────────────────────

async def _open_session(
    redis: aioredis.Redis,
    principal_id: uuid.UUID,
    role: Role,
    settings: Settings,
) -> LoginResponse:
    """Mint a token pair and overwrite the principal's session record."""
    access_identifier = generate_identifier()
    refresh_identifier = generate_identifier()
    access_token = issue_access_token(principal_id, role, access_identifier, settings)
    refresh_token = issue_refresh_token(principal_id, role, refresh_identifier, settings)
    await cache.save_session(
        redis,
        principal_id,
        cache.SessionRecord(
            access_identifier=access_identifier,
            refresh_identifier=refresh_identifier,
        ),
    )
    return LoginResponse(access_token=access_token, refresh_token=refresh_token)


async def _verify_refresh(
    redis: aioredis.Redis,
    token: str,
    settings: Settings,
    *,
    admin: bool,
) -> tuple[TokenPayload, cache.SessionRecord]:
    """
    Check a refresh token against its signature, variant, expiry and the
    session record.  Every failure surfaces as the same 401.
    """
    try:
        payload = verify_token(token, settings.jwt_refresh_secret, settings.jwt_algorithm)
    except TokenVerificationError as exc:
        logger.warning("Refresh token rejected: %s", exc)
        raise InvalidRefreshToken(RefreshFailure.INVALID_TOKEN) from exc

    if (payload.role == Role.ADMIN) != admin:
        logger.warning(
            "Refresh token for role %s presented to the %s endpoint",
            payload.role.value,
            "admin" if admin else "user",
        )
        raise InvalidRefreshToken(RefreshFailure.WRONG_VARIANT)

    if payload.exp < int(time.time()):
        logger.warning("Refresh token for %s has expired", payload.sub)
        raise InvalidRefreshToken(RefreshFailure.EXPIRED)

    record = await cache.get_session(redis, payload.sub)
    if record is None:
        logger.warning("No session record for %s", payload.sub)
        raise InvalidRefreshToken(RefreshFailure.NO_SESSION)

    if not secrets.compare_digest(record.refresh_identifier, payload.identifier):
        logger.warning("Refresh identifier mismatch for %s", payload.sub)
        raise InvalidRefreshToken(RefreshFailure.IDENTIFIER_MISMATCH)

    return payload, record


def _principal_id(payload: TokenPayload) -> uuid.UUID:
    try:
        return uuid.UUID(payload.sub)
    except ValueError as exc:
        logger.warning("Refresh token subject %r is not a UUID", payload.sub)
        raise InvalidRefreshToken(RefreshFailure.INVALID_TOKEN) from exc


async def _rotate_access(
    redis: aioredis.Redis,
    principal_id: uuid.UUID,
    role: Role,
    record: cache.SessionRecord,
    settings: Settings,
) -> RefreshResponse:
    """New access identifier, same refresh identifier."""
    access_identifier = generate_identifier()
    access_token = issue_access_token(principal_id, role, access_identifier, settings)
    await cache.save_session(
        redis,
        principal_id,
        cache.SessionRecord(
            access_identifier=access_identifier,
            refresh_identifier=record.refresh_identifier,
        ),
    )
    return RefreshResponse(access_token=access_token)


# ── Login ─────────────────────────────────────────────────────────────────────

async def admin_login(
    session: AsyncSession,
    body: AdminLoginRequest,
    settings: Settings,
    redis: aioredis.Redis,
) -> LoginResponse:
    admin = await authenticate_admin(session, body.username, body.password)
    response = await _open_session(redis, admin.id, Role.ADMIN, settings)
    logger.info("Admin %s logged in", admin.id)
    return response


async def user_login(
    session: AsyncSession,
    body: UserLoginRequest,
    settings: Settings,
    redis: aioredis.Redis,
) -> LoginResponse:
    user, role = await authenticate_user(session, body.email, body.password)
    response = await _open_session(redis, user.id, role, settings)
    logger.info("User %s logged in as %s", user.id, role.value)
    return response


# ── Token refresh ─────────────────────────────────────────────────────────────

async def admin_refresh(
    session: AsyncSession,
    body: RefreshRequest,
    settings: Settings,
    redis: aioredis.Redis,
) -> RefreshResponse:
    payload, record = await _verify_refresh(redis, body.refresh_token, settings, admin=True)
    admin_id = _principal_id(payload)

    admin = await get_admin_by_id(session, admin_id)
    if admin is None:
        logger.warning("Admin %s no longer exists", admin_id)
        raise InvalidRefreshToken(RefreshFailure.PRINCIPAL_GONE)

    response = await _rotate_access(redis, admin.id, Role.ADMIN, record, settings)
    logger.info("Access token refreshed for admin %s", admin.id)
    return response


async def user_refresh(
    session: AsyncSession,
    body: RefreshRequest,
    settings: Settings,
    redis: aioredis.Redis,
) -> RefreshResponse:
    payload, record = await _verify_refresh(redis, body.refresh_token, settings, admin=False)
    user_id = _principal_id(payload)

    user = await get_user_by_id(session, user_id)
    if user is None or not user.is_active:
        logger.warning("User %s is missing or inactive", user_id)
        raise InvalidRefreshToken(RefreshFailure.PRINCIPAL_GONE)

    # The role may have changed since login (e.g. promoted to moderator).
    role = resolve_role(user)
    if role is None:
        logger.warning("User %s has no role on refresh", user_id)
        raise InvalidRefreshToken(RefreshFailure.ROLE_NOT_FOUND)

    response = await _rotate_access(redis, user.id, role, record, settings)
    logger.info("Access token refreshed for user %s", user.id)
    return response


# ── Logout ────────────────────────────────────────────────────────────────────

async def logout(redis: aioredis.Redis, principal_id: uuid.UUID) -> None:
    await cache.delete_session(redis, principal_id)
    logger.info("Session closed for %s", principal_id)


# ── Password reset ────────────────────────────────────────────────────────────

async def password_reset_request(
    session: AsyncSession,
    body: PasswordResetRequestSchema,
    redis: aioredis.Redis,
) -> None:
    user = await get_active_user_by_email(session, body.email)

    otp_code = generate_otp()
    await cache.save_otp(redis, user.email, cache.OTPRecord(otp_code=otp_code, user_id=user.id))
    await queue_email(
        EmailJobType.SEND_OTP,
        to=user.email,
        subject="Password reset code",
        context={
            "full_name": user.full_name,
            "otp_code": otp_code,
            "expires_minutes": OTP_TTL_SECONDS // 60,
        },
    )
    logger.info("Password reset OTP issued for user %s", user.id)


async def password_reset_verify(
    session: AsyncSession,
    body: PasswordResetVerifySchema,
    redis: aioredis.Redis,
) -> None:
    """
    Exchange a valid OTP for a freshly generated password, mailed to the user.

    A wrong code leaves the stored OTP in place so the user can retry until
    it expires.
    """
    user = await get_active_user_by_email(session, body.email)

    record = await cache.get_otp(redis, user.email)
    if record is None:
        logger.warning("No pending OTP for user %s", user.id)
        raise InvalidOTP()
    if not secrets.compare_digest(record.otp_code, body.otp_code):
        logger.warning("OTP mismatch for user %s", user.id)
        raise InvalidOTP()

    new_password = generate_strong_password()
    await update_password(session, user, new_password)
    await cache.delete_otp(redis, user.email)
    await queue_email(
        EmailJobType.SEND_RESET_PASSWORD,
        to=user.email,
        subject="Your new password",
        context={"full_name": user.full_name, "password": new_password},
    )
    logger.info("Password reset completed for user %s", user.id)


# ── Change password ───────────────────────────────────────────────────────────

async def change_password(
    session: AsyncSession,
    body: ChangePasswordRequest,
    user_id: uuid.UUID,
) -> None:
    await change_user_password(
        session,
        user_id=user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    logger.info("Password changed for user %s", user_id)
