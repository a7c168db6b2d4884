"""Utility helpers for standardized error responses and the alert error taxonomy."""
from typing import Any

from fastapi import HTTPException, status


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class AlertError(HTTPException):
    """Base class for errors surfaced by the alert service.

    Subclasses fix the HTTP status; ``code`` is the stable result kind the
    routing layer (and clients) switch on.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "ALERT_ERROR"
    default_message: str = "Alert request failed."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message or self.default_message
        super().__init__(
            status_code=type(self).status_code,
            detail=error_response(self.code, self.message, details),
        )


class AlertNotFound(AlertError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "ALERT_NOT_FOUND"
    default_message = "Alert not found."


class CardNotFound(AlertError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "CARD_NOT_FOUND"
    default_message = "Card not found."


class AlertForbidden(AlertError):
    """Permission check failed.

    Codes: ``NOT_ALERT_OWNER``, ``NOT_ALERT_RECIPIENT``,
    ``ADMIN_UNSUBSCRIBE_FORBIDDEN``, ``CARD_READ_FORBIDDEN``.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_message = "You don't have permissions to do that."


class AlertValidationError(AlertError):
    status_code = 422
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid alert payload."


class AlertPersistenceError(AlertError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "ALERT_PERSISTENCE_FAILED"
    default_message = "The alert could not be saved."


class NotificationError(Exception):
    """Raised by notification transports when a single send fails.

    Never surfaces to callers: dispatch catches and logs it per job.
    """


__all__ = [
    "error_response",
    "AlertError",
    "AlertNotFound",
    "CardNotFound",
    "AlertForbidden",
    "AlertValidationError",
    "AlertPersistenceError",
    "NotificationError",
]
