"""
Milestone reminder scheduling on the ARQ queue.

A reminder is a deferred ``milestone_reminder`` job with a deterministic id
(``milestone-<id>``), so it can be looked up, moved or cancelled later
without storing the job id anywhere.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from arq import ArqRedis
from arq.constants import job_key_prefix, result_key_prefix
from arq.jobs import Job, JobResult, JobStatus

from thesync.milestones.constants import (
    MILESTONE_REMINDER_JOB,
    REMINDER_LEAD_TIME,
    reminder_job_id,
)
from thesync.milestones.schemas import (
    MilestoneJobData,
    MilestoneReminderRequest,
    ReminderStatusResponse,
)
from thesync.task_queue import QUEUE_NAME

logger = logging.getLogger(__name__)

_CANCELLABLE = frozenset({JobStatus.deferred, JobStatus.queued})


def compute_run_time(start_date: datetime) -> datetime:
    """Naive start dates are taken as UTC."""
    if start_date.tzinfo is None:
        start_date = start_date.replace(tzinfo=timezone.utc)
    return start_date - REMINDER_LEAD_TIME


def _job(pool: ArqRedis, job_id: str) -> Job:
    return Job(job_id, pool, _queue_name=QUEUE_NAME)


async def schedule_reminder(
    pool: ArqRedis,
    milestone_id: uuid.UUID,
    body: MilestoneReminderRequest,
    *,
    now: datetime | None = None,
) -> str | None:
    """
    Defer a reminder until three days before the milestone starts.

    Returns the job id, or None when the run time has already passed or a
    reminder for this milestone is already pending.
    """
    run_at = compute_run_time(body.start_date)
    now = now or datetime.now(timezone.utc)
    if run_at <= now:
        logger.warning(
            "Cannot schedule reminder for milestone %s: run time %s has passed",
            milestone_id,
            run_at.isoformat(),
        )
        return None

    data = MilestoneJobData(
        milestone_id=milestone_id,
        milestone_name=body.milestone_name,
        start_date=body.start_date,
        semester_id=body.semester_id,
        recipients=[str(r) for r in body.recipients],
    )
    job = await pool.enqueue_job(
        MILESTONE_REMINDER_JOB,
        data.model_dump(mode="json"),
        _job_id=reminder_job_id(milestone_id),
        _queue_name=QUEUE_NAME,
        _defer_until=run_at,
    )
    if job is None:
        logger.warning("Reminder for milestone %s is already scheduled", milestone_id)
        return None

    logger.info("Scheduled reminder for milestone %s at %s", milestone_id, run_at.isoformat())
    return job.job_id


async def cancel_reminder(pool: ArqRedis, milestone_id: uuid.UUID) -> bool:
    """Remove a reminder that has not started yet.  False if absent or already run."""
    job_id = reminder_job_id(milestone_id)
    status = await _job(pool, job_id).status()

    if status == JobStatus.not_found:
        logger.warning("No reminder job for milestone %s", milestone_id)
        return False
    if status not in _CANCELLABLE:
        logger.warning("Reminder for milestone %s is %s, not cancelling", milestone_id, status.value)
        return False

    await pool.zrem(QUEUE_NAME, job_id)
    await pool.delete(job_key_prefix + job_id)
    logger.info("Cancelled reminder for milestone %s", milestone_id)
    return True


async def reschedule_reminder(
    pool: ArqRedis,
    milestone_id: uuid.UUID,
    body: MilestoneReminderRequest,
    *,
    now: datetime | None = None,
) -> str | None:
    """Cancel any pending reminder and schedule a new one for the new start date."""
    await cancel_reminder(pool, milestone_id)
    # A finished job's result would block reuse of the same job id.
    await pool.delete(result_key_prefix + reminder_job_id(milestone_id))
    return await schedule_reminder(pool, milestone_id, body, now=now)


async def get_reminder_status(
    pool: ArqRedis, milestone_id: uuid.UUID
) -> ReminderStatusResponse | None:
    job_id = reminder_job_id(milestone_id)
    job = _job(pool, job_id)
    status = await job.status()
    if status == JobStatus.not_found:
        return None

    info = await job.info()
    scheduled_for = None
    result = None
    if info is not None:
        if info.score:
            scheduled_for = datetime.fromtimestamp(info.score / 1000, tz=timezone.utc)
        if isinstance(info, JobResult):
            result = info.result if info.success else str(info.result)

    return ReminderStatusResponse(
        job_id=job_id,
        status=status.value,
        scheduled_for=scheduled_for,
        result=result,
    )
