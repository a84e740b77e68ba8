import uuid

import pytest

from thesync.auth import cache
from thesync.auth.constants import OTP_TTL_SECONDS, SESSION_TTL_SECONDS


@pytest.mark.asyncio
async def test_session_roundtrip_and_ttl(fake_redis) -> None:
    principal_id = uuid.uuid4()
    record = cache.SessionRecord(access_identifier="a" * 16, refresh_identifier="r" * 16)

    await cache.save_session(fake_redis, principal_id, record)

    assert await cache.get_session(fake_redis, principal_id) == record
    assert fake_redis.ttl(f"cache:auth:{principal_id}") == SESSION_TTL_SECONDS


@pytest.mark.asyncio
async def test_session_overwrite_replaces_record(fake_redis) -> None:
    principal_id = uuid.uuid4()
    await cache.save_session(fake_redis, principal_id, cache.SessionRecord(access_identifier="a1", refresh_identifier="r1"))
    await cache.save_session(fake_redis, principal_id, cache.SessionRecord(access_identifier="a2", refresh_identifier="r2"))

    record = await cache.get_session(fake_redis, principal_id)
    assert record.refresh_identifier == "r2"


@pytest.mark.asyncio
async def test_session_expires(fake_redis) -> None:
    principal_id = uuid.uuid4()
    await cache.save_session(fake_redis, principal_id, cache.SessionRecord(access_identifier="a", refresh_identifier="r"))

    fake_redis.advance(SESSION_TTL_SECONDS + 1)

    assert await cache.get_session(fake_redis, principal_id) is None


@pytest.mark.asyncio
async def test_delete_session_is_idempotent(fake_redis) -> None:
    principal_id = uuid.uuid4()
    await cache.delete_session(fake_redis, principal_id)
    await cache.save_session(fake_redis, principal_id, cache.SessionRecord(access_identifier="a", refresh_identifier="r"))
    await cache.delete_session(fake_redis, principal_id)
    await cache.delete_session(fake_redis, principal_id)
    assert await cache.get_session(fake_redis, principal_id) is None


@pytest.mark.asyncio
async def test_otp_key_is_case_insensitive(fake_redis) -> None:
    user_id = uuid.uuid4()
    await cache.save_otp(fake_redis, "Student@Example.com", cache.OTPRecord(otp_code="12345678", user_id=user_id))

    record = await cache.get_otp(fake_redis, "student@example.com")
    assert record is not None
    assert record.user_id == user_id
    assert fake_redis.ttl("cache:otp:student@example.com") == OTP_TTL_SECONDS


@pytest.mark.asyncio
async def test_otp_expires_after_ten_minutes(fake_redis) -> None:
    await cache.save_otp(fake_redis, "a@example.com", cache.OTPRecord(otp_code="12345678", user_id=uuid.uuid4()))
    fake_redis.advance(OTP_TTL_SECONDS)
    assert await cache.get_otp(fake_redis, "a@example.com") is None
