"""Redis cache helpers for the auth domain.

Key schema
----------
cache:auth:{principal_id}   JSON SessionRecord   TTL 7 d    one per admin or user
cache:otp:{email}           JSON OTPRecord       TTL 10 min password-reset code

A session record is always overwritten, never merged: writing a new login
invalidates every refresh token whose identifier no longer matches.
"""
from __future__ import annotations

import json
import uuid

from pydantic import BaseModel, ConfigDict
from redis.asyncio import Redis

from thesync.auth.constants import (
    OTP_CACHE_PREFIX,
    OTP_TTL_SECONDS,
    SESSION_CACHE_PREFIX,
    SESSION_TTL_SECONDS,
)


class SessionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_identifier: str
    refresh_identifier: str


class OTPRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    otp_code: str
    user_id: uuid.UUID


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def session_key(principal_id: uuid.UUID | str) -> str:
    return f"{SESSION_CACHE_PREFIX}:{principal_id}"


async def save_session(
    redis: Redis, principal_id: uuid.UUID | str, record: SessionRecord
) -> None:
    """Replace the principal's session record and reset its TTL."""
    await redis.set(
        session_key(principal_id), record.model_dump_json(), ex=SESSION_TTL_SECONDS
    )


async def get_session(redis: Redis, principal_id: uuid.UUID | str) -> SessionRecord | None:
    raw = await redis.get(session_key(principal_id))
    if raw is None:
        return None
    return SessionRecord.model_validate(json.loads(raw))


async def delete_session(redis: Redis, principal_id: uuid.UUID | str) -> None:
    """Idempotent: deleting an absent session is not an error."""
    await redis.delete(session_key(principal_id))


# ---------------------------------------------------------------------------
# Password-reset OTP
# ---------------------------------------------------------------------------


def otp_key(email: str) -> str:
    return f"{OTP_CACHE_PREFIX}:{email.lower()}"


async def save_otp(redis: Redis, email: str, record: OTPRecord) -> None:
    await redis.set(otp_key(email), record.model_dump_json(), ex=OTP_TTL_SECONDS)


async def get_otp(redis: Redis, email: str) -> OTPRecord | None:
    raw = await redis.get(otp_key(email))
    if raw is None:
        return None
    return OTPRecord.model_validate(json.loads(raw))


async def delete_otp(redis: Redis, email: str) -> None:
    await redis.delete(otp_key(email))
