"""Decide whether unsubscribing should delete the whole alert."""
from __future__ import annotations

from typing import Any

from alertbox.services.channels import chat_channel, email_recipients


def should_delete_on_unsubscribe(alert: Any, user_id: int) -> bool:
    """Return ``True`` when ``user_id`` unsubscribing would leave ``alert`` inert.

    That is the case when the user created the alert, is its only email
    recipient, and there is no chat channel still delivering it. Callers must
    check the user may unsubscribe (``can_unsubscribe``) first.
    """

    recipients = email_recipients(alert)
    return (
        user_id == alert.creator_id
        and len(recipients) == 1
        and recipients[0].id == user_id
        and chat_channel(alert) is None
    )


__all__ = ["should_delete_on_unsubscribe"]
