"""Lookup helpers over an alert's delivery channels.

Work on ORM rows and ``AlertRead`` snapshots alike: only ``channels``,
``channel_type`` and ``recipients[].id`` are read.
"""
from __future__ import annotations

from typing import Any

from alertbox.models.alert import ChannelType


def find_channel(alert: Any, kind: ChannelType) -> Any | None:
    """Return the first channel of ``kind`` on ``alert``, or ``None``."""

    for channel in alert.channels or ():
        if channel.channel_type == kind:
            return channel
    return None


def email_channel(alert: Any) -> Any | None:
    return find_channel(alert, ChannelType.email)


def chat_channel(alert: Any) -> Any | None:
    return find_channel(alert, ChannelType.chat)


def email_recipients(alert: Any) -> list[Any]:
    channel = email_channel(alert)
    if channel is None:
        return []
    return list(channel.recipients or ())


def recipient_ids(alert: Any) -> set[int]:
    """Ids of every user on the alert's email channels."""

    return {
        recipient.id
        for channel in alert.channels or ()
        if channel.channel_type == ChannelType.email
        for recipient in channel.recipients or ()
    }


__all__ = ["find_channel", "email_channel", "chat_channel", "email_recipients", "recipient_ids"]
