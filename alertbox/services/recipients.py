"""Recipient diff between two alert snapshots."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from alertbox.services.channels import email_recipients


@dataclass(frozen=True)
class RecipientDiff:
    """Users removed from and added to an alert's email channel."""

    removed: list[Any] = field(default_factory=list)
    added: list[Any] = field(default_factory=list)

    @property
    def removed_ids(self) -> set[int]:
        return {user.id for user in self.removed}

    @property
    def added_ids(self) -> set[int]:
        return {user.id for user in self.added}

    def __bool__(self) -> bool:
        return bool(self.removed or self.added)


def _recipients_by_id(alert: Any) -> dict[int, Any]:
    return {recipient.id: recipient for recipient in email_recipients(alert)}


def diff_recipients(old_alert: Any, new_alert: Any) -> RecipientDiff:
    """Compare email recipients by user id.

    ``removed`` holds users only in ``old_alert``, ``added`` users only in
    ``new_alert``; each list is ordered by user id and holds a user at most once.
    """

    old = _recipients_by_id(old_alert)
    new = _recipients_by_id(new_alert)
    return RecipientDiff(
        removed=[old[user_id] for user_id in sorted(old.keys() - new.keys())],
        added=[new[user_id] for user_id in sorted(new.keys() - old.keys())],
    )


__all__ = ["RecipientDiff", "diff_recipients"]
