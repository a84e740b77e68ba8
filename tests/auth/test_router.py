from datetime import datetime, timedelta, timezone

import pytest

from thesync.auth import cache
from thesync_shared.auth.tokens import issue_token
from thesync_shared.constants import Role

ADMIN_PASSWORD = "Secret123!@#"
USER_PASSWORD = "Password1234!"


async def _admin_tokens(client) -> dict:
    resp = await client.post(
        "/api/v1/auth/admin/login",
        json={"username": "adminuser", "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200
    return resp.json()["data"]


async def _user_tokens(client, email: str) -> dict:
    resp = await client.post(
        "/api/v1/auth/user/login",
        json={"email": email, "password": USER_PASSWORD},
    )
    assert resp.status_code == 200
    return resp.json()["data"]


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_health(client) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "thesync"}


@pytest.mark.asyncio
async def test_login_success_envelope(client, seed) -> None:
    await seed.admin("adminuser")

    resp = await client.post(
        "/api/v1/auth/admin/login",
        json={"username": "adminuser", "password": ADMIN_PASSWORD},
    )

    body = resp.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert set(body["data"]) == {"accessToken", "refreshToken"}
    assert resp.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_login_failure_envelope(client, seed) -> None:
    await seed.admin("adminuser")

    resp = await client.post(
        "/api/v1/auth/admin/login",
        json={"username": "adminuser", "password": "Wrong1234567!"},
    )

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "statusCode": 401, "error": "Not authorized"}


@pytest.mark.asyncio
async def test_weak_password_is_422_in_envelope(client) -> None:
    resp = await client.post(
        "/api/v1/auth/admin/login",
        json={"username": "adminuser", "password": "alllowercase1!"},
    )

    body = resp.json()
    assert resp.status_code == 422
    assert body["success"] is False
    assert body["statusCode"] == 422
    assert any("password" in msg for msg in body["error"])


@pytest.mark.asyncio
async def test_refresh_endpoint_round_trip(client, seed) -> None:
    await seed.user("stud@example.com", student_code="SE1")
    tokens = await _user_tokens(client, "stud@example.com")

    resp = await client.post("/api/v1/auth/user/refresh", json={"refreshToken": tokens["refreshToken"]})

    assert resp.status_code == 200
    assert set(resp.json()["data"]) == {"accessToken"}


@pytest.mark.asyncio
async def test_user_refresh_token_rejected_at_admin_endpoint(client, seed) -> None:
    await seed.user("stud@example.com", student_code="SE1")
    tokens = await _user_tokens(client, "stud@example.com")

    resp = await client.post("/api/v1/auth/admin/refresh", json={"refreshToken": tokens["refreshToken"]})

    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_admin_logout_is_204_and_ends_refresh(client, seed, fake_redis) -> None:
    admin = await seed.admin("adminuser")
    tokens = await _admin_tokens(client)

    resp = await client.post("/api/v1/auth/admin/logout", headers=_bearer(tokens["accessToken"]))

    assert resp.status_code == 204
    assert resp.content == b""
    assert await cache.get_session(fake_redis, admin.id) is None
    again = await client.post("/api/v1/auth/admin/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert again.status_code == 401


@pytest.mark.asyncio
async def test_user_logout_is_200(client, seed) -> None:
    await seed.user("lect@example.com", lecturer=True)
    tokens = await _user_tokens(client, "lect@example.com")

    resp = await client.post("/api/v1/auth/user/logout", headers=_bearer(tokens["accessToken"]))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "statusCode": 200, "data": None}


@pytest.mark.asyncio
async def test_guard_requires_token(client) -> None:
    resp = await client.post("/api/v1/auth/admin/logout")

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
    assert resp.json()["error"] == "Not authenticated"


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["wrong-secret", "expired", "refresh-secret"])
async def test_guard_rejects_bad_access_tokens(client, settings, bad) -> None:
    secret = {
        "wrong-secret": "not-the-access-secret",
        "expired": settings.jwt_access_secret,
        "refresh-secret": settings.jwt_refresh_secret,
    }[bad]
    now = datetime.now(timezone.utc) - (timedelta(hours=2) if bad == "expired" else timedelta(0))
    token = issue_token(
        sub="6f1c1a52-5d1c-4b7e-9a38-2f0f3c1b9e11",
        role=Role.ADMIN,
        identifier="AbCdEfGh12345678",
        secret=secret,
        algorithm=settings.jwt_algorithm,
        expire_seconds=60,
        now=now,
    )

    resp = await client.post("/api/v1/auth/admin/logout", headers=_bearer(token))

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_guard_forbids_role_outside_allowed_set(client, seed) -> None:
    await seed.admin("adminuser")
    await seed.user("stud@example.com", student_code="SE1")
    admin = await _admin_tokens(client)
    student = await _user_tokens(client, "stud@example.com")

    student_at_admin = await client.post("/api/v1/auth/admin/logout", headers=_bearer(student["accessToken"]))
    admin_at_user = await client.post("/api/v1/auth/user/logout", headers=_bearer(admin["accessToken"]))

    assert student_at_admin.status_code == 403
    assert student_at_admin.json() == {"success": False, "statusCode": 403, "error": "Forbidden resource"}
    assert admin_at_user.status_code == 403


@pytest.mark.asyncio
async def test_password_reset_endpoints(client, seed, fake_redis, email_jobs) -> None:
    await seed.user("reset@example.com", student_code="SE1")

    resp = await client.post("/api/v1/auth/password-reset/request", json={"email": "reset@example.com"})
    assert resp.status_code == 200
    record = await cache.get_otp(fake_redis, "reset@example.com")

    bad = await client.post(
        "/api/v1/auth/password-reset/verify",
        json={"email": "reset@example.com", "otpCode": "short"},
    )
    assert bad.status_code == 422

    ok = await client.post(
        "/api/v1/auth/password-reset/verify",
        json={"email": "reset@example.com", "otpCode": record.otp_code},
    )
    assert ok.status_code == 200
    assert [args[0] for _, args in email_jobs] == ["send-otp", "send-reset-password"]


@pytest.mark.asyncio
async def test_password_reset_unknown_email_is_404(client) -> None:
    resp = await client.post("/api/v1/auth/password-reset/request", json={"email": "who@example.com"})
    assert resp.status_code == 404
    assert resp.json()["statusCode"] == 404


@pytest.mark.asyncio
async def test_change_password_endpoint(client, seed) -> None:
    await seed.user("mod@example.com", moderator=True)
    tokens = await _user_tokens(client, "mod@example.com")

    wrong = await client.put(
        "/api/v1/auth/change-password",
        json={"currentPassword": "Wrong-1234567", "newPassword": "Brand-New1234"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert wrong.status_code == 409

    ok = await client.put(
        "/api/v1/auth/change-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "Brand-New1234"},
        headers=_bearer(tokens["accessToken"]),
    )
    assert ok.status_code == 200

    relogin = await client.post(
        "/api/v1/auth/user/login",
        json={"email": "mod@example.com", "password": "Brand-New1234"},
    )
    assert relogin.status_code == 200
