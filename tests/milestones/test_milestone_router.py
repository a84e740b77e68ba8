import uuid
from datetime import datetime, timedelta, timezone

import pytest

from thesync.task_queue import get_pool

ADMIN_PASSWORD = "Secret123!@#"
USER_PASSWORD = "Password1234!"


@pytest.fixture
def admin_app(app, pool):
    app.dependency_overrides[get_pool] = lambda: pool
    return app


async def _token(client, path: str, body: dict) -> str:
    resp = await client.post(path, json=body)
    assert resp.status_code == 200
    return resp.json()["data"]["accessToken"]


def _reminder_body(days_ahead: int) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
    return {
        "milestoneName": "Final report",
        "startDate": start.isoformat(),
        "recipients": ["student@example.com"],
    }


@pytest.mark.asyncio
async def test_admin_can_schedule_and_inspect(admin_app, client, seed, pool) -> None:
    await seed.admin("adminuser")
    token = await _token(client, "/api/v1/auth/admin/login", {"username": "adminuser", "password": ADMIN_PASSWORD})
    headers = {"Authorization": f"Bearer {token}"}
    milestone_id = uuid.uuid4()

    created = await client.post(
        f"/api/v1/milestones/{milestone_id}/reminder", json=_reminder_body(10), headers=headers
    )
    assert created.status_code == 200
    data = created.json()["data"]
    assert data["scheduled"] is True
    assert data["jobId"] == f"milestone-{milestone_id}"

    status = await client.get(f"/api/v1/milestones/{milestone_id}/reminder", headers=headers)
    assert status.status_code == 200
    assert status.json()["data"]["status"] == "deferred"

    cancelled = await client.delete(f"/api/v1/milestones/{milestone_id}/reminder", headers=headers)
    assert cancelled.json()["data"] == {"cancelled": True}

    missing = await client.get(f"/api/v1/milestones/{milestone_id}/reminder", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["success"] is False


@pytest.mark.asyncio
async def test_too_late_to_schedule(admin_app, client, seed) -> None:
    await seed.admin("adminuser")
    token = await _token(client, "/api/v1/auth/admin/login", {"username": "adminuser", "password": ADMIN_PASSWORD})

    resp = await client.post(
        f"/api/v1/milestones/{uuid.uuid4()}/reminder",
        json=_reminder_body(1),
        headers={"Authorization": f"Bearer {token}"},
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"jobId": None, "scheduled": False, "runAt": None}


@pytest.mark.asyncio
async def test_users_cannot_manage_reminders(admin_app, client, seed) -> None:
    await seed.user("lect@example.com", lecturer=True)
    token = await _token(client, "/api/v1/auth/user/login", {"email": "lect@example.com", "password": USER_PASSWORD})

    resp = await client.post(
        f"/api/v1/milestones/{uuid.uuid4()}/reminder",
        json=_reminder_body(10),
        headers={"Authorization": f"Bearer {token}"},
    )

    assert resp.status_code == 403
