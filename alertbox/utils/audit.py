"""Audit logging helper utilities."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from alertbox.models.audit import AuditLog
from alertbox.utils.time import utcnow

SENSITIVE_KEYS = {"email"}


def _mask_email(value: Any) -> str:
    text = str(value)
    if "@" in text:
        _, domain = text.split("@", 1)
        return f"***@{domain}"
    return "***"


def _mask_value(value: Any) -> Any:
    if value is None:
        return None
    return _mask_email(value)


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a copy of ``data`` with obvious PII fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            masked_value = _mask_value(value) if key in SENSITIVE_KEYS else value
            sanitized[key] = sanitize_payload_for_audit(masked_value)
        return sanitized

    if isinstance(data, list):
        return [sanitize_payload_for_audit(item) for item in data]

    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: int | None,
    data: dict | None = None,
) -> None:
    """Persist an audit entry in the shared AuditLog table."""

    db.add(
        AuditLog(
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id if entity_id is not None else 0,
            data_json=sanitize_payload_for_audit(data or {}),
            at=utcnow(),
        )
    )


def actor_label(actor: Any, fallback: str = "system") -> str:
    """Return the canonical actor string for an acting user."""

    user_id = getattr(actor, "user_id", None)
    if user_id is None:
        return fallback
    if getattr(actor, "is_superuser", False):
        return f"admin:{user_id}"
    return f"user:{user_id}"
