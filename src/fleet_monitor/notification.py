from __future__ import annotations

from collections.abc import Sequence

from .models import ChangeVerdict, NotificationDecision

DEFAULT_SUBJECT = "Server Status"


def fleet_paragraph(
    rendering: str,
    *,
    email_requested: bool,
    track_changes: bool,
    verdict: ChangeVerdict,
) -> str | None:
    """Return the fleet summary when this run should report it."""
    if not email_requested:
        return None
    if not track_changes:
        return rendering
    if verdict is ChangeVerdict.CHANGED:
        return rendering
    return None


def decide_notification(
    fleet_message: str | None,
    queue_warnings: Sequence[str] = (),
) -> NotificationDecision:
    messages: list[str] = []
    if fleet_message:
        messages.append(fleet_message)
    messages.extend(queue_warnings)
    if not messages:
        return NotificationDecision(should_send=False)
    return NotificationDecision(should_send=True, body="\n".join(messages))
