"""Alert schemas."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator, model_validator

from alertbox.models.alert import AlertCondition, ChannelType, ScheduleType

ScheduleDay = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


# --- Read models ---------------------------------------------------------


class UserRef(BaseModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    common_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CardRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ChannelRead(BaseModel):
    id: int
    channel_type: ChannelType
    enabled: bool
    schedule_type: ScheduleType
    schedule_hour: int | None = None
    schedule_day: str | None = None
    details: dict[str, Any] | None = None
    recipients: list[UserRef] = []

    model_config = ConfigDict(from_attributes=True)


class AlertRead(BaseModel):
    id: int
    creator_id: int
    creator: UserRef
    card: CardRef
    alert_condition: AlertCondition
    alert_first_only: bool
    alert_above_goal: bool | None = None
    channels: list[ChannelRead] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AlertWithPermissions(AlertRead):
    read_only: bool


# --- Request models ------------------------------------------------------


class RecipientPayload(BaseModel):
    """A recipient reference; clients may send whole user maps, only ``id`` is used."""

    id: StrictInt

    model_config = ConfigDict(extra="ignore")


class CardPayload(BaseModel):
    id: StrictInt

    model_config = ConfigDict(extra="ignore")


class ChannelPayload(BaseModel):
    channel_type: ChannelType
    enabled: StrictBool = True
    schedule_type: ScheduleType = ScheduleType.hourly
    schedule_hour: StrictInt | None = Field(default=None, ge=0, le=23)
    schedule_day: ScheduleDay | None = None
    recipients: list[RecipientPayload] = []
    details: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("schedule_day", mode="before")
    @classmethod
    def _normalize_day(cls, value: Any) -> Any:
        """Accept ``"Mon"`` / ``"MON"`` as well as ``"mon"``."""

        if isinstance(value, str):
            return value.lower()
        return value

    @model_validator(mode="after")
    def _check_shape(self) -> "ChannelPayload":
        if self.schedule_type == ScheduleType.hourly:
            self.schedule_hour = None
            self.schedule_day = None
        elif self.schedule_hour is None:
            raise ValueError(f"schedule_hour is required for {self.schedule_type.value} channels")
        elif self.schedule_type == ScheduleType.daily:
            self.schedule_day = None
        elif self.schedule_day is None:
            raise ValueError("schedule_day is required for weekly channels")

        if self.channel_type == ChannelType.chat:
            if self.recipients:
                raise ValueError("chat channels do not take recipients")
            destination = (self.details or {}).get("channel")
            if not isinstance(destination, str) or not destination.strip():
                raise ValueError("chat channels require details.channel")
        else:
            self.details = None
            ids = [recipient.id for recipient in self.recipients]
            if len(ids) != len(set(ids)):
                raise ValueError("recipients must be unique")
        return self


class AlertPayload(BaseModel):
    alert_condition: AlertCondition
    alert_first_only: StrictBool
    alert_above_goal: StrictBool | None = None
    card: CardPayload
    channels: list[ChannelPayload] = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")

    @field_validator("channels")
    @classmethod
    def _one_channel_per_kind(cls, channels: list[ChannelPayload]) -> list[ChannelPayload]:
        kinds = [channel.channel_type for channel in channels]
        if len(kinds) != len(set(kinds)):
            raise ValueError("at most one channel per channel_type")
        return channels

    def recipient_ids(self) -> set[int]:
        return {
            recipient.id
            for channel in self.channels
            if channel.channel_type == ChannelType.email
            for recipient in channel.recipients
        }


class AlertCreate(AlertPayload):
    @model_validator(mode="after")
    def _has_destination(self) -> "AlertCreate":
        has_chat = any(channel.channel_type == ChannelType.chat for channel in self.channels)
        if not has_chat and not self.recipient_ids():
            raise ValueError("an alert needs at least one email recipient or a chat channel")
        return self


class AlertUpdate(AlertPayload):
    pass


__all__ = [
    "UserRef",
    "CardRef",
    "ChannelRead",
    "AlertRead",
    "AlertWithPermissions",
    "RecipientPayload",
    "CardPayload",
    "ChannelPayload",
    "AlertPayload",
    "AlertCreate",
    "AlertUpdate",
]
