"""Pydantic schemas."""
from .alert import (
    AlertCreate,
    AlertPayload,
    AlertRead,
    AlertUpdate,
    AlertWithPermissions,
    CardPayload,
    CardRef,
    ChannelPayload,
    ChannelRead,
    RecipientPayload,
    UserRef,
)
from .user import Actor

__all__ = [
    "Actor",
    "AlertCreate",
    "AlertPayload",
    "AlertRead",
    "AlertUpdate",
    "AlertWithPermissions",
    "CardPayload",
    "CardRef",
    "ChannelPayload",
    "ChannelRead",
    "RecipientPayload",
    "UserRef",
]
