from datetime import timedelta

# Reminders fire this long before the milestone starts.
REMINDER_LEAD_TIME: timedelta = timedelta(days=3)

MILESTONE_JOB_PREFIX: str = "milestone"
MILESTONE_REMINDER_JOB: str = "milestone_reminder"


def reminder_job_id(milestone_id: object) -> str:
    """Deterministic job id so a milestone never has two pending reminders."""
    return f"{MILESTONE_JOB_PREFIX}-{milestone_id}"
