"""
Identity service — auth router.

Only HTTP concerns live here:
  - Route declarations, HTTP methods, status codes, response_model
  - Dependency injection (session, settings, redis, current principal)
  - Forwarding to the controller and wrapping the result in the envelope

Zero business logic. Zero DB queries.
"""
import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from thesync.auth.controller import (
    admin_login as admin_login_controller,
    admin_refresh as admin_refresh_controller,
    change_password as change_password_controller,
    logout as logout_controller,
    password_reset_request as password_reset_request_controller,
    password_reset_verify as password_reset_verify_controller,
    user_login as user_login_controller,
    user_refresh as user_refresh_controller,
)
from thesync.auth.dependencies import require_admin, require_user
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
from thesync.config import Settings, get_settings
from thesync.database import get_db
from thesync.rate_limit import limiter
from thesync.redis_client import get_redis
from thesync_shared.models.response import BaseResponse
from thesync_shared.models.user import CurrentUser

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Admin ─────────────────────────────────────────────────────────────────────

@router.post(
    "/admin/login",
    response_model=BaseResponse[LoginResponse],
    summary="Admin login (username + password)",
)
@limiter.limit("10/minute")
async def admin_login(
    request: Request,
    body: AdminLoginRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[LoginResponse]:
    data = await admin_login_controller(session, body, settings, redis)
    return BaseResponse[LoginResponse](data=data)


@router.post(
    "/admin/refresh",
    response_model=BaseResponse[RefreshResponse],
    summary="Exchange an admin refresh token for a new access token",
)
async def admin_refresh(
    body: RefreshRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[RefreshResponse]:
    data = await admin_refresh_controller(session, body, settings, redis)
    return BaseResponse[RefreshResponse](data=data)


@router.post(
    "/admin/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Close the admin's session",
)
async def admin_logout(
    current_user: CurrentUser = Depends(require_admin),
    redis: aioredis.Redis = Depends(get_redis),
) -> Response:
    await logout_controller(redis, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── User (lecturer, moderator, student) ───────────────────────────────────────

@router.post(
    "/user/login",
    response_model=BaseResponse[LoginResponse],
    summary="User login (email + password)",
)
@limiter.limit("10/minute")
async def user_login(
    request: Request,
    body: UserLoginRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[LoginResponse]:
    data = await user_login_controller(session, body, settings, redis)
    return BaseResponse[LoginResponse](data=data)


@router.post(
    "/user/refresh",
    response_model=BaseResponse[RefreshResponse],
    summary="Exchange a user refresh token for a new access token",
)
async def user_refresh(
    body: RefreshRequest,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[RefreshResponse]:
    data = await user_refresh_controller(session, body, settings, redis)
    return BaseResponse[RefreshResponse](data=data)


@router.post(
    "/user/logout",
    response_model=BaseResponse[None],
    summary="Close the user's session",
)
async def user_logout(
    current_user: CurrentUser = Depends(require_user),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[None]:
    await logout_controller(redis, current_user.id)
    return BaseResponse[None]()


# ── Password reset / change ───────────────────────────────────────────────────

@router.post(
    "/password-reset/request",
    response_model=BaseResponse[None],
    summary="Email a one-time reset code",
)
@limiter.limit("5/hour")
async def password_reset_request(
    request: Request,
    body: PasswordResetRequestSchema,
    session: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[None]:
    await password_reset_request_controller(session, body, redis)
    return BaseResponse[None]()


@router.post(
    "/password-reset/verify",
    response_model=BaseResponse[None],
    summary="Verify the reset code and email a new password",
)
@limiter.limit("10/hour")
async def password_reset_verify(
    request: Request,
    body: PasswordResetVerifySchema,
    session: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> BaseResponse[None]:
    await password_reset_verify_controller(session, body, redis)
    return BaseResponse[None]()


@router.put(
    "/change-password",
    response_model=BaseResponse[None],
    summary="Change the authenticated user's password",
)
async def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(require_user),
    session: AsyncSession = Depends(get_db),
) -> BaseResponse[None]:
    await change_password_controller(session, body, current_user.id)
    return BaseResponse[None]()
