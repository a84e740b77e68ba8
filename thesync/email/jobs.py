"""
Email job producer (API side).

Emails are never sent inline: each one becomes a ``send_email`` ARQ job that
the worker delivers with retry.  Enqueue failures are logged by task_queue
and do not fail the calling request.
"""
from __future__ import annotations

import enum
import logging
from typing import Any

from thesync import task_queue

logger = logging.getLogger(__name__)

SEND_EMAIL_JOB = "send_email"


class EmailJobType(str, enum.Enum):
    SEND_OTP = "send-otp"
    SEND_RESET_PASSWORD = "send-reset-password"
    SEND_MILESTONE_REMINDER = "send-milestone-reminder"


async def queue_email(
    job_type: EmailJobType,
    *,
    to: str,
    subject: str,
    context: dict[str, Any],
) -> str | None:
    job_id = await task_queue.enqueue(SEND_EMAIL_JOB, job_type.value, to, subject, context)
    if job_id is None:
        logger.warning("Email %s to %s was not queued", job_type.value, to)
    return job_id
