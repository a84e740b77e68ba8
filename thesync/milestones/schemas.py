"""Request/response schemas for milestone reminder scheduling."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class _Base(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MilestoneReminderRequest(_Base):
    """Body for POST/PUT /milestones/{milestone_id}/reminder."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    milestone_name: str = Field(min_length=1, max_length=255)
    start_date: datetime
    semester_id: uuid.UUID | None = None
    recipients: list[EmailStr] = Field(default_factory=list)


class MilestoneJobData(_Base):
    """Payload stored with the ARQ job and handed to the worker."""

    milestone_id: uuid.UUID
    milestone_name: str
    start_date: datetime
    semester_id: uuid.UUID | None = None
    recipients: list[str] = Field(default_factory=list)


class ScheduleResponse(_Base):
    job_id: str | None = None
    scheduled: bool
    run_at: datetime | None = None


class CancelResponse(_Base):
    cancelled: bool


class ReminderStatusResponse(_Base):
    job_id: str
    status: str
    scheduled_for: datetime | None = None
    result: Any = None
