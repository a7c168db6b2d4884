"""Question (card) access checks."""
from __future__ import annotations

from sqlalchemy.orm import Session

from alertbox.models.card import Card
from alertbox.schemas.user import Actor


def get_card(db: Session, card_id: int) -> Card | None:
    return db.get(Card, card_id)


def can_read_card(actor: Actor, card: Card) -> bool:
    """Superusers read everything; others need to own the card or have it shared."""

    if actor.is_superuser:
        return True
    if card.archived:
        return False
    return card.creator_id == actor.user_id or card.is_shared


__all__ = ["get_card", "can_read_card"]
