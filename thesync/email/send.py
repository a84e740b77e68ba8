"""
Email rendering — one small HTML body per job type.

The worker calls render() and hands the result to smtp.deliver().  Context
values are escaped before interpolation.
"""
from __future__ import annotations

from html import escape
from typing import Any

from thesync.email.jobs import EmailJobType


def _greeting(context: dict[str, Any]) -> str:
    name = context.get("full_name")
    return f"<p>Hi {escape(str(name))},</p>" if name else "<p>Hi,</p>"


def _render_otp(context: dict[str, Any]) -> str:
    return (
        _greeting(context)
        + "<p>Use this code to reset your TheSync password:</p>"
        f"<h2 style='letter-spacing:4px'>{escape(str(context['otp_code']))}</h2>"
        f"<p>The code expires in {int(context.get('expires_minutes', 10))} minutes. "
        "If you did not ask for a reset, ignore this email.</p>"
    )


def _render_reset_password(context: dict[str, Any]) -> str:
    return (
        _greeting(context)
        + "<p>Your password has been reset. Your new password is:</p>"
        f"<p><code>{escape(str(context['password']))}</code></p>"
        "<p>Log in and change it from your account settings.</p>"
    )


def _render_milestone_reminder(context: dict[str, Any]) -> str:
    return (
        _greeting(context)
        + f"<p>The milestone <strong>{escape(str(context['milestone_name']))}</strong> "
        f"starts on {escape(str(context['start_date']))}.</p>"
        "<p>Make sure your group's work is ready before then.</p>"
    )


_RENDERERS = {
    EmailJobType.SEND_OTP: _render_otp,
    EmailJobType.SEND_RESET_PASSWORD: _render_reset_password,
    EmailJobType.SEND_MILESTONE_REMINDER: _render_milestone_reminder,
}


def render(job_type: EmailJobType | str, context: dict[str, Any]) -> str:
    """Raises ValueError for an unknown job type and KeyError for a missing field."""
    return _RENDERERS[EmailJobType(job_type)](context)
