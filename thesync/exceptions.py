"""
Identity service — domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  The shared exception handlers
wrap them in the flat error envelope.
"""
from fastapi import HTTPException, status

from thesync.auth.constants import LoginFailure, RefreshFailure


# ── Authentication ────────────────────────────────────────────────────────────

class NotAuthorized(HTTPException):
    """
    Credential check failed.

    Unknown principal, wrong password, inactive account and missing role all
    surface with the same body so callers cannot enumerate accounts; the
    concrete cause stays on ``reason`` for logs and tests.
    """

    def __init__(self, reason: LoginFailure) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized",
        )
        self.reason = reason


class InvalidRefreshToken(HTTPException):
    """Refresh token is malformed, expired, for the wrong variant, or superseded."""

    def __init__(self, reason: RefreshFailure) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )
        self.reason = reason


class InvalidOTP(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired OTP code",
        )


# ── Account state ─────────────────────────────────────────────────────────────

class UserNotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or inactive",
        )


class SamePassword(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="New password must be different from current password",
        )


class CurrentPasswordIncorrect(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="Current password is incorrect",
        )


# ── Milestone reminders ───────────────────────────────────────────────────────

class MilestoneJobNotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No reminder job found for this milestone",
        )


class TaskQueueUnavailable(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Background job queue is unavailable",
        )
