"""Alert and delivery channel models."""
import enum

from sqlalchemy import JSON, Boolean, Column, Enum, ForeignKey, Index, SmallInteger, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AlertCondition(str, enum.Enum):
    rows = "rows"
    goal = "goal"


class ChannelType(str, enum.Enum):
    email = "email"
    chat = "chat"


class ScheduleType(str, enum.Enum):
    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"


alert_channel_recipients = Table(
    "alert_channel_recipients",
    Base.metadata,
    Column("channel_id", ForeignKey("alert_channels.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Alert(Base):
    """A saved question paired with a trigger condition and delivery channels."""

    __tablename__ = "alerts"
    __table_args__ = (Index("ix_alerts_card_id", "card_id"),)

    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    card_id: Mapped[int] = mapped_column(ForeignKey("cards.id"), nullable=False)
    alert_condition: Mapped[AlertCondition] = mapped_column(
        Enum(AlertCondition, name="alertcondition"), nullable=False
    )
    alert_first_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    alert_above_goal: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    creator = relationship("User", foreign_keys=[creator_id])
    card = relationship("Card")
    channels: Mapped[list["AlertChannel"]] = relationship(
        back_populates="alert",
        cascade="all, delete-orphan",
        order_by="AlertChannel.id",
        passive_deletes=True,
    )


class AlertChannel(Base):
    """One delivery mechanism attached to an alert."""

    __tablename__ = "alert_channels"

    alert_id: Mapped[int] = mapped_column(ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_type: Mapped[ChannelType] = mapped_column(Enum(ChannelType, name="channeltype"), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    schedule_type: Mapped[ScheduleType] = mapped_column(
        Enum(ScheduleType, name="scheduletype"), default=ScheduleType.hourly, nullable=False
    )
    schedule_hour: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    schedule_day: Mapped[str | None] = mapped_column(String(3), nullable=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    alert: Mapped[Alert] = relationship(back_populates="channels")
    recipients = relationship("User", secondary=alert_channel_recipients, order_by="User.id")


__all__ = [
    "Alert",
    "AlertChannel",
    "AlertCondition",
    "ChannelType",
    "ScheduleType",
    "alert_channel_recipients",
]
