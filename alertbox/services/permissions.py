"""Permission predicates for alerts.

Pure functions of ``(actor, alert)``; callers turn a ``False`` into an
``AlertForbidden``.
"""
from __future__ import annotations

from typing import Any

from alertbox.schemas.user import Actor
from alertbox.services.channels import recipient_ids


def is_creator(actor: Actor, alert: Any) -> bool:
    return actor.user_id == alert.creator_id


def is_recipient(actor: Actor, alert: Any) -> bool:
    return actor.user_id in recipient_ids(alert)


def can_read(actor: Actor, alert: Any) -> bool:
    """Superusers, the creator, and anyone receiving the alert may read it."""

    if actor.is_superuser:
        return True
    return is_creator(actor, alert) or is_recipient(actor, alert)


def can_write(actor: Actor, alert: Any) -> bool:
    """A creator keeps write access only while still receiving the alert."""

    if actor.is_superuser:
        return True
    return is_creator(actor, alert) and is_recipient(actor, alert)


def can_unsubscribe(actor: Actor, alert: Any) -> bool:
    # Superusers edit the alert instead of unsubscribing.
    if actor.is_superuser:
        return False
    return can_read(actor, alert)


def can_delete(actor: Actor, alert: Any) -> bool:
    return actor.is_superuser or is_creator(actor, alert)


__all__ = ["is_creator", "is_recipient", "can_read", "can_write", "can_unsubscribe", "can_delete"]
