"""
ARQ worker — email delivery and milestone reminders.

Runs as a SEPARATE process from the FastAPI API server.

Start:  arq thesync.worker.WorkerSettings

Email jobs retry with exponential backoff (2 s, then 4 s) and give up after
the third attempt.
"""
from __future__ import annotations

import logging
from typing import Any

from arq import Retry

from thesync.config import Settings
from thesync.email import send, smtp
from thesync.email.jobs import SEND_EMAIL_JOB, EmailJobType
from thesync.milestones.schemas import MilestoneJobData
from thesync.task_queue import QUEUE_NAME, redis_settings_from_url

logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s: %(message)s")
logger = logging.getLogger("thesync.worker")

EMAIL_MAX_TRIES = 3
EMAIL_BACKOFF_SECONDS = 2


class EmailDeliveryError(Exception):
    """Raised when the last delivery attempt fails so ARQ records the job as failed."""


# ── Startup / shutdown hooks ────────────────────────────────────────────────

async def startup(ctx: dict[str, Any]) -> None:
    ctx["settings"] = Settings()
    logger.info("Worker started")


async def shutdown(ctx: dict[str, Any]) -> None:
    logger.info("Worker shutting down")


# ── Email ───────────────────────────────────────────────────────────────────

def backoff_seconds(job_try: int) -> int:
    """Delay before the next attempt: 2 s after the first failure, 4 s after the second."""
    return EMAIL_BACKOFF_SECONDS * 2 ** (job_try - 1)


async def send_email(
    ctx: dict[str, Any],
    job_type: str,
    to: str,
    subject: str,
    context: dict[str, Any],
) -> bool:
    settings: Settings = ctx["settings"]
    job_try: int = ctx.get("job_try", 1)

    if not smtp.is_configured(settings):
        logger.warning("SMTP not configured — skipping %s email to %s", job_type, to)
        return False

    html = send.render(job_type, context)
    if await smtp.deliver(to, subject, html, settings):
        logger.info("Sent %s email to %s (attempt %d)", job_type, to, job_try)
        return True

    if job_try < EMAIL_MAX_TRIES:
        delay = backoff_seconds(job_try)
        logger.warning("Email %s to %s failed, retrying in %ds", job_type, to, delay)
        raise Retry(defer=delay)

    logger.error("Email %s to %s failed after %d attempts", job_type, to, job_try)
    raise EmailDeliveryError(f"Could not deliver {job_type} email to {to}")


# ── Milestone reminders ─────────────────────────────────────────────────────

async def milestone_reminder(ctx: dict[str, Any], payload: dict[str, Any]) -> int:
    """Queue one reminder email per recipient.  Returns the number queued."""
    data = MilestoneJobData.model_validate(payload)
    logger.info(
        "Processing reminder for milestone %s (%s), starts %s",
        data.milestone_id,
        data.milestone_name,
        data.start_date.isoformat(),
    )

    queued = 0
    for recipient in data.recipients:
        job = await ctx["redis"].enqueue_job(
            SEND_EMAIL_JOB,
            EmailJobType.SEND_MILESTONE_REMINDER.value,
            recipient,
            f"Upcoming milestone: {data.milestone_name}",
            {
                "milestone_name": data.milestone_name,
                "start_date": data.start_date.date().isoformat(),
            },
            _queue_name=QUEUE_NAME,
        )
        if job is not None:
            queued += 1

    logger.info("Queued %d reminder emails for milestone %s", queued, data.milestone_id)
    return queued


# ── ARQ worker configuration ────────────────────────────────────────────────

class WorkerSettings:
    """ARQ reads this class to configure the worker process."""
    functions = [send_email, milestone_reminder]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = redis_settings_from_url(Settings().redis_url)
    max_jobs = 20
    max_tries = EMAIL_MAX_TRIES
    job_timeout = 60
    # Keep results for 1 day so reminder status stays inspectable.
    keep_result = 86_400
    queue_name = QUEUE_NAME
