from dataclasses import dataclass, field
from typing import Any

import pytest
from arq.jobs import JobStatus

from thesync.milestones import service


@dataclass
class EnqueuedJob:
    job_id: str
    function: str
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


@dataclass
class FakePool:
    """Records the ArqRedis calls the milestone service makes."""

    jobs: dict[str, EnqueuedJob] = field(default_factory=dict)
    statuses: dict[str, JobStatus] = field(default_factory=dict)
    removed: list[tuple[str, str]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    async def enqueue_job(self, function: str, *args: Any, _job_id: str | None = None, **kwargs: Any):
        if _job_id in self.jobs:
            return None
        job = EnqueuedJob(job_id=_job_id, function=function, args=args, kwargs=kwargs)
        self.jobs[_job_id] = job
        self.statuses[_job_id] = JobStatus.deferred
        return job

    async def zrem(self, name: str, job_id: str) -> int:
        self.removed.append((name, job_id))
        self.jobs.pop(job_id, None)
        self.statuses.pop(job_id, None)
        return 1

    async def delete(self, *keys: str) -> int:
        self.deleted.extend(keys)
        return len(keys)


@pytest.fixture
def pool(monkeypatch) -> FakePool:
    fake = FakePool()

    class _Job:
        def __init__(self, job_id: str, redis: Any, _queue_name: str = "") -> None:
            self.job_id = job_id

        async def status(self) -> JobStatus:
            return fake.statuses.get(self.job_id, JobStatus.not_found)

        async def info(self):
            return None

    monkeypatch.setattr(service, "Job", _Job)
    return fake
