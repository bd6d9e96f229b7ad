"""Slack Block Kit messages for interview scheduling events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from interview_scheduling.models.interview import Interview

if TYPE_CHECKING:
    from interview_scheduling.clients.notifications import NotificationContext

HEADERS = {
    "interview_scheduled": "📅  Interview Scheduled",
    "interview_rescheduled": "🔁  Interview Rescheduled",
    "interview_cancelled": "❌  Interview Cancelled",
    "interview_no_show": "🚫  Candidate No-Show",
}


def _format_time(value: Any) -> str:
    return value.strftime("%a %d %b %Y, %H:%M %Z") if value else "-"


def build_interview_event_blocks(
    event: str,
    interview: Interview,
    context: NotificationContext,
) -> list[dict[str, Any]]:
    """
    Build Slack notification for a scheduling event.

    Args:
        event: Notification event name (e.g., "interview_scheduled")
        interview: Interview after the change
        context: Candidate/job details and reason

    Returns:
        List of Slack Block Kit blocks
    """
    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": HEADERS.get(event, "Interview Update")},
        }
    ]

    info_text = f"*{context.candidate_name}*\n"
    info_text += f"Position: {context.job_title}\n"
    if context.previous_scheduled_date:
        info_text += f"Was: ~{_format_time(context.previous_scheduled_date)}~\n"
    info_text += f"When: {_format_time(interview.scheduled_date)} "
    interview_type = interview.type.value.replace("_", " ").title()
    info_text += f"({interview.duration_minutes} min, {interview_type})\n"
    if interview.meeting_link:
        info_text += f"🔗 <{interview.meeting_link}|Join meeting>\n"

    blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": info_text}})

    if context.reason:
        blocks.append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*Reason:* {context.reason}"},
            }
        )

    footer = f"Interview `{interview.id}`"
    if interview.is_auto_scheduled:
        footer += " · auto-scheduled"
    if context.auto_reschedule_enabled:
        footer += " · a replacement interview will be scheduled automatically"

    blocks.append({"type": "divider"})
    blocks.append({"type": "context", "elements": [{"type": "mrkdwn", "text": footer}]})

    return blocks
