"""Admin-only endpoints for milestone reminder jobs."""
from __future__ import annotations

import uuid

from arq import ArqRedis
from fastapi import APIRouter, Depends

from thesync.auth.dependencies import require_admin
from thesync.exceptions import MilestoneJobNotFound
from thesync.milestones.schemas import (
    CancelResponse,
    MilestoneReminderRequest,
    ReminderStatusResponse,
    ScheduleResponse,
)
from thesync.milestones.service import (
    cancel_reminder,
    compute_run_time,
    get_reminder_status,
    reschedule_reminder,
    schedule_reminder,
)
from thesync.task_queue import get_pool
from thesync_shared.models.response import BaseResponse

router = APIRouter(
    prefix="/milestones",
    tags=["milestones"],
    dependencies=[Depends(require_admin)],
)


def _schedule_response(job_id: str | None, body: MilestoneReminderRequest) -> ScheduleResponse:
    if job_id is None:
        return ScheduleResponse(scheduled=False)
    return ScheduleResponse(job_id=job_id, scheduled=True, run_at=compute_run_time(body.start_date))


@router.post(
    "/{milestone_id}/reminder",
    response_model=BaseResponse[ScheduleResponse],
    summary="Schedule the reminder three days before the milestone starts",
)
async def schedule(
    milestone_id: uuid.UUID,
    body: MilestoneReminderRequest,
    pool: ArqRedis = Depends(get_pool),
) -> BaseResponse[ScheduleResponse]:
    job_id = await schedule_reminder(pool, milestone_id, body)
    return BaseResponse[ScheduleResponse](data=_schedule_response(job_id, body))


@router.put(
    "/{milestone_id}/reminder",
    response_model=BaseResponse[ScheduleResponse],
    summary="Move the reminder after the start date changed",
)
async def reschedule(
    milestone_id: uuid.UUID,
    body: MilestoneReminderRequest,
    pool: ArqRedis = Depends(get_pool),
) -> BaseResponse[ScheduleResponse]:
    job_id = await reschedule_reminder(pool, milestone_id, body)
    return BaseResponse[ScheduleResponse](data=_schedule_response(job_id, body))


@router.delete(
    "/{milestone_id}/reminder",
    response_model=BaseResponse[CancelResponse],
    summary="Cancel a reminder that has not run yet",
)
async def cancel(
    milestone_id: uuid.UUID,
    pool: ArqRedis = Depends(get_pool),
) -> BaseResponse[CancelResponse]:
    cancelled = await cancel_reminder(pool, milestone_id)
    return BaseResponse[CancelResponse](data=CancelResponse(cancelled=cancelled))


@router.get(
    "/{milestone_id}/reminder",
    response_model=BaseResponse[ReminderStatusResponse],
    summary="Inspect the reminder job",
)
async def status(
    milestone_id: uuid.UUID,
    pool: ArqRedis = Depends(get_pool),
) -> BaseResponse[ReminderStatusResponse]:
    info = await get_reminder_status(pool, milestone_id)
    if info is None:
        raise MilestoneJobNotFound()
    return BaseResponse[ReminderStatusResponse](data=info)
