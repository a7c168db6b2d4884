"""Seed sample users, questions and an alert for local development."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from alertbox import db, models
from alertbox.config import get_settings
from alertbox.models.alert import AlertCondition, ChannelType, ScheduleType


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    db.create_all()
    session = db.get_sessionmaker()()

    try:
        admin = models.User(email="admin@example.com", first_name="Ada", last_name="Admin", is_superuser=True)
        alice = models.User(email="alice@example.com", first_name="Alice")
        bob = models.User(email="bob@example.com", first_name="Bob")
        session.add_all([admin, alice, bob])
        session.flush()

        card = models.Card(name="Daily signups", creator_id=alice.id, is_shared=True)
        session.add(card)
        session.flush()

        alert = models.Alert(
            creator_id=alice.id,
            card_id=card.id,
            alert_condition=AlertCondition.rows,
            alert_first_only=False,
        )
        alert.channels.append(
            models.AlertChannel(
                channel_type=ChannelType.email,
                schedule_type=ScheduleType.daily,
                schedule_hour=9,
                recipients=[alice, bob],
            )
        )
        session.add(alert)
        session.commit()
        print(f"Seed data inserted (users: admin={admin.id}, alice={alice.id}, bob={bob.id}; alert={alert.id}).")
    finally:
        session.close()


if __name__ == "__main__":
    main()
