"""Alert notification transport and post-commit dispatch."""
from __future__ import annotations

import enum
import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Any, Protocol

from alertbox.config import Settings, get_settings
from alertbox.schemas.alert import AlertRead
from alertbox.schemas.user import Actor
from alertbox.utils.errors import NotificationError

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    new_alert_created = "new_alert_created"
    admin_unsubscribed_user = "admin_unsubscribed_user"
    user_added = "user_added"
    user_unsubscribed_self = "user_unsubscribed_self"


class NotificationTransport(Protocol):
    """Outbound delivery for alert subscription emails."""

    def is_configured(self) -> bool: ...

    def send_new_alert_created(self, alert: AlertRead) -> None: ...

    def send_admin_unsubscribed_user(self, alert: AlertRead, removed_user: Any, acting_admin: Actor) -> None: ...

    def send_user_added(self, alert: AlertRead, added_user: Any, acting_admin: Actor) -> None: ...

    def send_user_unsubscribed_self(self, alert: AlertRead, user: Actor) -> None: ...


@dataclass(frozen=True)
class NotificationJob:
    """One send computed from a committed alert mutation."""

    kind: NotificationKind
    alert: AlertRead
    user: Any = None
    acting_admin: Actor | None = None

    @property
    def recipient_id(self) -> int | None:
        if self.kind == NotificationKind.new_alert_created:
            return self.alert.creator_id
        user_id = getattr(self.user, "id", None)
        if user_id is None:
            user_id = getattr(self.user, "user_id", None)
        return user_id


class NullNotificationTransport:
    """Transport used when no outbound email is configured; never sends."""

    def is_configured(self) -> bool:
        return False

    def send_new_alert_created(self, alert: AlertRead) -> None:
        return None

    def send_admin_unsubscribed_user(self, alert: AlertRead, removed_user: Any, acting_admin: Actor) -> None:
        return None

    def send_user_added(self, alert: AlertRead, added_user: Any, acting_admin: Actor) -> None:
        return None

    def send_user_unsubscribed_self(self, alert: AlertRead, user: Actor) -> None:
        return None


class SmtpNotificationTransport:
    """Send plain-text alert subscription emails over SMTP."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def is_configured(self) -> bool:
        return self.settings.email_configured

    def _question_url(self, alert: AlertRead) -> str:
        return f"{self.settings.SITE_URL.rstrip('/')}/question/{alert.card.id}"

    def _send(self, to_address: str | None, subject: str, body: str) -> None:
        if not to_address:
            raise NotificationError("Recipient has no email address.")
        message = MIMEText(body, "plain", "utf-8")
        message["Subject"] = subject
        message["From"] = self.settings.SMTP_FROM_ADDRESS
        message["To"] = to_address
        try:
            with smtplib.SMTP(
                self.settings.SMTP_HOST,
                self.settings.SMTP_PORT,
                timeout=self.settings.SMTP_TIMEOUT_SECONDS,
            ) as server:
                if self.settings.SMTP_USE_TLS:
                    server.starttls()
                if self.settings.SMTP_USERNAME:
                    server.login(self.settings.SMTP_USERNAME, self.settings.SMTP_PASSWORD or "")
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP delivery to {to_address} failed: {exc}") from exc

    def send_new_alert_created(self, alert: AlertRead) -> None:
        self._send(
            alert.creator.email,
            f"You set up an alert for {alert.card.name}",
            f"Hi {alert.creator.common_name or alert.creator.email},\n\n"
            f"Your alert on \"{alert.card.name}\" is set up.\n"
            f"{self._question_url(alert)}\n",
        )

    def send_admin_unsubscribed_user(self, alert: AlertRead, removed_user: Any, acting_admin: Actor) -> None:
        self._send(
            removed_user.email,
            f"You've been unsubscribed from an alert for {alert.card.name}",
            f"{acting_admin.common_name} unsubscribed you from the alert on \"{alert.card.name}\".\n"
            f"{self._question_url(alert)}\n",
        )

    def send_user_added(self, alert: AlertRead, added_user: Any, acting_admin: Actor) -> None:
        self._send(
            added_user.email,
            f"You've been added to an alert for {alert.card.name}",
            f"{acting_admin.common_name} added you to the alert on \"{alert.card.name}\".\n"
            f"{self._question_url(alert)}\n",
        )

    def send_user_unsubscribed_self(self, alert: AlertRead, user: Actor) -> None:
        self._send(
            user.email,
            f"You unsubscribed from an alert for {alert.card.name}",
            f"You will no longer receive the alert on \"{alert.card.name}\".\n"
            f"{self._question_url(alert)}\n",
        )


def get_notification_transport() -> NotificationTransport:
    """Return the transport selected by settings (FastAPI dependency)."""

    settings = get_settings()
    if settings.email_configured:
        return SmtpNotificationTransport(settings)
    return NullNotificationTransport()


def _send_job(transport: NotificationTransport, job: NotificationJob) -> None:
    if job.kind == NotificationKind.new_alert_created:
        transport.send_new_alert_created(job.alert)
    elif job.kind == NotificationKind.admin_unsubscribed_user:
        transport.send_admin_unsubscribed_user(job.alert, job.user, job.acting_admin)
    elif job.kind == NotificationKind.user_added:
        transport.send_user_added(job.alert, job.user, job.acting_admin)
    elif job.kind == NotificationKind.user_unsubscribed_self:
        transport.send_user_unsubscribed_self(job.alert, job.user)
    else:  # pragma: no cover - exhaustive over NotificationKind
        raise ValueError(f"Unknown notification kind: {job.kind}")


def dispatch_notifications(transport: NotificationTransport, jobs: list[NotificationJob]) -> int:
    """Send every job; a failing send is logged and does not stop the others.

    Returns the number of jobs delivered.
    """

    if not jobs or not transport.is_configured():
        return 0

    delivered = 0
    for job in jobs:
        try:
            _send_job(transport, job)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Alert notification failed",
                exc_info=True,
                extra={"kind": job.kind.value, "alert_id": job.alert.id, "recipient_id": job.recipient_id},
            )
            continue
        delivered += 1
        logger.info(
            "Alert notification sent",
            extra={"kind": job.kind.value, "alert_id": job.alert.id, "recipient_id": job.recipient_id},
        )
    return delivered


__all__ = [
    "NotificationKind",
    "NotificationTransport",
    "NotificationJob",
    "NullNotificationTransport",
    "SmtpNotificationTransport",
    "get_notification_transport",
    "dispatch_notifications",
]
