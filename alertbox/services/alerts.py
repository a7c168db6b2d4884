"""Alert service: list, create, update, unsubscribe and delete alerts.

Every operation authorizes and mutates inside one transaction, then returns
the notification jobs derived from the committed result. Callers dispatch
those jobs after the response (see ``notifications.dispatch_notifications``).
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from alertbox.models.alert import Alert
from alertbox.schemas.alert import AlertCreate, AlertPayload, AlertRead, AlertUpdate, AlertWithPermissions
from alertbox.schemas.user import Actor
from alertbox.services import alert_store, cards
from alertbox.services.channels import recipient_ids
from alertbox.services.notifications import NotificationJob, NotificationKind, NotificationTransport
from alertbox.services.permissions import can_delete, can_read, can_unsubscribe, can_write, is_creator
from alertbox.services.recipients import diff_recipients
from alertbox.services.unsubscribe import should_delete_on_unsubscribe
from alertbox.utils.audit import actor_label, log_audit
from alertbox.utils.errors import (
    AlertForbidden,
    AlertNotFound,
    AlertPersistenceError,
    AlertValidationError,
    CardNotFound,
)

logger = logging.getLogger(__name__)


@contextmanager
def _transaction(db: Session, *, operation: str, alert_id: int | None = None) -> Iterator[None]:
    """Commit on success; roll back and raise ``AlertPersistenceError`` on database errors."""

    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Alert persistence failed",
            exc_info=True,
            extra={"operation": operation, "alert_id": alert_id},
        )
        raise AlertPersistenceError() from exc


def _snapshot(alert: Alert) -> AlertRead:
    return AlertRead.model_validate(alert)


def _with_permissions(actor: Actor, alert: Alert) -> AlertWithPermissions:
    return AlertWithPermissions(
        **_snapshot(alert).model_dump(),
        read_only=not can_write(actor, alert),
    )


def _load_alert(db: Session, alert_id: int, *, for_update: bool = False) -> Alert:
    try:
        alert = alert_store.retrieve_alert(db, alert_id, for_update=for_update)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Alert lookup failed", exc_info=True, extra={"alert_id": alert_id})
        raise AlertPersistenceError() from exc
    if alert is None:
        raise AlertNotFound()
    return alert


def _reload(db: Session, alert_id: int) -> AlertRead:
    db.expire_all()
    return _snapshot(_load_alert(db, alert_id))


def _check_card(db: Session, actor: Actor, card_id: int) -> None:
    card = cards.get_card(db, card_id)
    if card is None:
        raise CardNotFound()
    if not cards.can_read_card(actor, card):
        raise AlertForbidden("You don't have permissions to read that question.", code="CARD_READ_FORBIDDEN")


def _resolve_recipients(db: Session, payload: AlertPayload) -> dict[int, Any]:
    wanted = payload.recipient_ids()
    users = alert_store.resolve_users(db, wanted)
    missing = sorted(wanted - users.keys())
    if missing:
        raise AlertValidationError(
            "Unknown recipients.",
            details={"fields": [{"loc": ["channels", "recipients"], "msg": f"unknown user ids: {missing}"}]},
        )
    return users


def _write_forbidden(actor: Actor, alert: Alert) -> AlertForbidden:
    if not is_creator(actor, alert):
        return AlertForbidden("Only the alert creator can edit it.", code="NOT_ALERT_OWNER")
    return AlertForbidden("You are no longer a recipient of this alert.", code="NOT_ALERT_RECIPIENT")


# --- Reads -----------------------------------------------------------------


def list_alerts(db: Session, actor: Actor) -> list[AlertWithPermissions]:
    """Return every alert the actor can read or write, flagged ``read_only`` where it cannot write."""

    return [
        _with_permissions(actor, alert)
        for alert in alert_store.retrieve_alerts(db)
        if can_read(actor, alert) or can_write(actor, alert)
    ]


def list_alerts_for_card(db: Session, actor: Actor, card_id: int) -> list[AlertWithPermissions]:
    if actor.is_superuser:
        alerts = alert_store.retrieve_alerts_for_card(db, card_id)
    else:
        alerts = alert_store.retrieve_user_alerts_for_card(db, card_id, actor.user_id)
    return [_with_permissions(actor, alert) for alert in alerts]


def get_alert(db: Session, actor: Actor, alert_id: int) -> AlertWithPermissions:
    alert = _load_alert(db, alert_id)
    if not can_read(actor, alert):
        raise AlertForbidden(code="NOT_ALERT_RECIPIENT")
    return _with_permissions(actor, alert)


# --- Mutations -------------------------------------------------------------


def create_alert(
    db: Session,
    actor: Actor,
    payload: AlertCreate,
    transport: NotificationTransport,
) -> tuple[AlertRead, list[NotificationJob]]:
    """Create an alert owned by ``actor`` and return it with its notification jobs."""

    _check_card(db, actor, payload.card.id)
    users = _resolve_recipients(db, payload)

    with _transaction(db, operation="create"):
        alert = alert_store.create_alert(db, creator_id=actor.user_id, payload=payload, users=users)
        alert_id = alert.id
        log_audit(
            db,
            actor=actor_label(actor),
            action="ALERT_CREATED",
            entity="Alert",
            entity_id=alert_id,
            data={
                "card_id": payload.card.id,
                "alert_condition": payload.alert_condition.value,
                "channel_types": [channel.channel_type.value for channel in payload.channels],
                "recipient_ids": sorted(users),
            },
        )

    created = _reload(db, alert_id)
    logger.info("Alert created", extra={"alert_id": created.id, "card_id": created.card.id})

    jobs: list[NotificationJob] = []
    if transport.is_configured():
        jobs.append(NotificationJob(kind=NotificationKind.new_alert_created, alert=created))
    return created, jobs


def update_alert(
    db: Session,
    actor: Actor,
    alert_id: int,
    payload: AlertUpdate,
    transport: NotificationTransport,
) -> tuple[AlertRead, list[NotificationJob]]:
    """Update an alert.

    Superusers may edit any alert; anyone else must be its creator and still
    one of its recipients. Only superuser edits notify the recipients whose
    subscription changed.
    """

    alert = _load_alert(db, alert_id, for_update=True)
    if not actor.is_superuser and not can_write(actor, alert):
        raise _write_forbidden(actor, alert)
    if payload.card.id != alert.card_id:
        _check_card(db, actor, payload.card.id)
    users = _resolve_recipients(db, payload)

    before = _snapshot(alert)
    with _transaction(db, operation="update", alert_id=alert_id):
        alert_store.update_alert(db, alert, payload, users)
        after_ids = recipient_ids(alert)
        log_audit(
            db,
            actor=actor_label(actor),
            action="ALERT_UPDATED",
            entity="Alert",
            entity_id=alert_id,
            data={
                "card_id": payload.card.id,
                "alert_condition": payload.alert_condition.value,
                "removed_recipient_ids": sorted(recipient_ids(before) - after_ids),
                "added_recipient_ids": sorted(after_ids - recipient_ids(before)),
            },
        )

    updated = _reload(db, alert_id)
    logger.info("Alert updated", extra={"alert_id": alert_id, "actor_id": actor.user_id})

    jobs: list[NotificationJob] = []
    if actor.is_superuser and transport.is_configured():
        diff = diff_recipients(before, updated)
        jobs.extend(
            NotificationJob(
                kind=NotificationKind.admin_unsubscribed_user, alert=before, user=user, acting_admin=actor
            )
            for user in diff.removed
        )
        jobs.extend(
            NotificationJob(kind=NotificationKind.user_added, alert=updated, user=user, acting_admin=actor)
            for user in diff.added
        )
    return updated, jobs


def unsubscribe(
    db: Session,
    actor: Actor,
    alert_id: int,
    transport: NotificationTransport,
) -> tuple[bool, list[NotificationJob]]:
    """Remove the actor from an alert's recipients.

    Returns ``(alert_deleted, jobs)``: the whole alert is deleted instead when
    the creator is its last email recipient and no chat channel remains.
    """

    if actor.is_superuser:
        raise AlertForbidden(
            "Admin users are not allowed to unsubscribe from alerts; edit the alert instead.",
            code="ADMIN_UNSUBSCRIBE_FORBIDDEN",
        )

    alert = _load_alert(db, alert_id, for_update=True)
    if not can_unsubscribe(actor, alert):
        raise AlertForbidden(code="NOT_ALERT_RECIPIENT")

    before = _snapshot(alert)
    delete = should_delete_on_unsubscribe(alert, actor.user_id)
    with _transaction(db, operation="unsubscribe", alert_id=alert_id):
        if delete:
            alert_store.delete_alert(db, alert)
        else:
            alert_store.remove_recipient(db, alert, actor.user_id)
        log_audit(
            db,
            actor=actor_label(actor),
            action="ALERT_UNSUBSCRIBED",
            entity="Alert",
            entity_id=alert_id,
            data={"user_id": actor.user_id, "alert_deleted": delete},
        )

    logger.info(
        "Alert unsubscribed",
        extra={"alert_id": alert_id, "user_id": actor.user_id, "alert_deleted": delete},
    )

    jobs: list[NotificationJob] = []
    if transport.is_configured():
        jobs.append(NotificationJob(kind=NotificationKind.user_unsubscribed_self, alert=before, user=actor))
    return delete, jobs


def delete_alert(db: Session, actor: Actor, alert_id: int) -> None:
    """Delete an alert; only its creator or a superuser may."""

    alert = _load_alert(db, alert_id, for_update=True)
    if not can_delete(actor, alert):
        raise AlertForbidden("Only the alert creator or an admin can delete it.", code="NOT_ALERT_OWNER")

    card_id = alert.card_id
    with _transaction(db, operation="delete", alert_id=alert_id):
        alert_store.delete_alert(db, alert)
        log_audit(
            db,
            actor=actor_label(actor),
            action="ALERT_DELETED",
            entity="Alert",
            entity_id=alert_id,
            data={"card_id": card_id, "reason": "delete"},
        )
    logger.info("Alert deleted", extra={"alert_id": alert_id, "actor_id": actor.user_id})


__all__ = [
    "list_alerts",
    "list_alerts_for_card",
    "get_alert",
    "create_alert",
    "update_alert",
    "unsubscribe",
    "delete_alert",
]
