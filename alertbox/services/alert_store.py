"""Persistence for alerts and their channels.

Functions here flush but never commit; the alert service owns the
transaction boundary.
"""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from alertbox.models.alert import Alert, AlertChannel, alert_channel_recipients
from alertbox.models.user import User
from alertbox.schemas.alert import AlertPayload, ChannelPayload


def _alert_select():
    return (
        select(Alert)
        .options(
            joinedload(Alert.creator, innerjoin=True),
            joinedload(Alert.card, innerjoin=True),
            selectinload(Alert.channels).selectinload(AlertChannel.recipients),
        )
        .order_by(Alert.id)
    )


def retrieve_alerts(db: Session) -> list[Alert]:
    return list(db.scalars(_alert_select()).unique().all())


def retrieve_alerts_for_card(db: Session, card_id: int) -> list[Alert]:
    stmt = _alert_select().where(Alert.card_id == card_id)
    return list(db.scalars(stmt).unique().all())


def retrieve_user_alerts_for_card(db: Session, card_id: int, user_id: int) -> list[Alert]:
    """Alerts on ``card_id`` that ``user_id`` created or receives."""

    receiving = (
        select(AlertChannel.alert_id)
        .join(alert_channel_recipients, alert_channel_recipients.c.channel_id == AlertChannel.id)
        .where(alert_channel_recipients.c.user_id == user_id)
    )
    stmt = _alert_select().where(
        Alert.card_id == card_id,
        or_(Alert.creator_id == user_id, Alert.id.in_(receiving)),
    )
    return list(db.scalars(stmt).unique().all())


def retrieve_alert(db: Session, alert_id: int, *, for_update: bool = False) -> Alert | None:
    stmt = _alert_select().where(Alert.id == alert_id)
    if for_update:
        stmt = stmt.with_for_update(of=Alert)
    return db.scalars(stmt).unique().one_or_none()


def resolve_users(db: Session, user_ids: Iterable[int]) -> dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    users = db.scalars(select(User).where(User.id.in_(ids))).all()
    return {user.id: user for user in users}


def _apply_channel(channel: AlertChannel, payload: ChannelPayload, users: dict[int, User]) -> None:
    channel.channel_type = payload.channel_type
    channel.enabled = payload.enabled
    channel.schedule_type = payload.schedule_type
    channel.schedule_hour = payload.schedule_hour
    channel.schedule_day = payload.schedule_day
    channel.details = payload.details
    channel.recipients = [users[recipient.id] for recipient in payload.recipients]


def create_alert(db: Session, *, creator_id: int, payload: AlertPayload, users: dict[int, User]) -> Alert:
    alert = Alert(
        creator_id=creator_id,
        card_id=payload.card.id,
        alert_condition=payload.alert_condition,
        alert_first_only=payload.alert_first_only,
        alert_above_goal=payload.alert_above_goal,
    )
    for channel_payload in payload.channels:
        channel = AlertChannel()
        _apply_channel(channel, channel_payload, users)
        alert.channels.append(channel)
    db.add(alert)
    db.flush()
    return alert


def update_alert(db: Session, alert: Alert, payload: AlertPayload, users: dict[int, User]) -> Alert:
    """Apply ``payload`` to ``alert``; channels are matched by type so their ids survive."""

    alert.card_id = payload.card.id
    alert.alert_condition = payload.alert_condition
    alert.alert_first_only = payload.alert_first_only
    alert.alert_above_goal = payload.alert_above_goal

    existing = {channel.channel_type: channel for channel in alert.channels}
    channels: list[AlertChannel] = []
    for channel_payload in payload.channels:
        channel = existing.pop(channel_payload.channel_type, None) or AlertChannel()
        _apply_channel(channel, channel_payload, users)
        channels.append(channel)
    alert.channels = channels
    db.flush()
    return alert


def delete_alert(db: Session, alert: Alert) -> None:
    db.delete(alert)
    db.flush()


def remove_recipient(db: Session, alert: Alert, user_id: int) -> None:
    """Drop ``user_id`` from every email channel of ``alert``; other channels are untouched."""

    for channel in alert.channels:
        channel.recipients = [user for user in channel.recipients if user.id != user_id]
    db.flush()


__all__ = [
    "retrieve_alerts",
    "retrieve_alerts_for_card",
    "retrieve_user_alerts_for_card",
    "retrieve_alert",
    "resolve_users",
    "create_alert",
    "update_alert",
    "delete_alert",
    "remove_recipient",
]
