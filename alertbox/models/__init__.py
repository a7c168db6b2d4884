"""ORM models package."""
from .alert import Alert, AlertChannel, AlertCondition, ChannelType, ScheduleType, alert_channel_recipients
from .audit import AuditLog
from .base import Base
from .card import Card
from .user import User

__all__ = [
    "Alert",
    "AlertChannel",
    "AlertCondition",
    "AuditLog",
    "Base",
    "Card",
    "ChannelType",
    "ScheduleType",
    "User",
    "alert_channel_recipients",
]
