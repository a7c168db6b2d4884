"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# --- Default env for the app under test
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALERTBOX_ENV", "test")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")
os.environ.pop("SMTP_HOST", None)

from alertbox.db import enable_sqlite_foreign_keys, get_db  # noqa: E402
from alertbox.main import app  # noqa: E402
from alertbox.models import (  # noqa: E402
    Alert,
    AlertChannel,
    AlertCondition,
    Base,
    Card,
    ChannelType,
    ScheduleType,
    User,
)
from alertbox.schemas.alert import AlertRead, CardRef, ChannelRead, UserRef  # noqa: E402
from alertbox.schemas.user import Actor  # noqa: E402
from alertbox.services.notifications import get_notification_transport  # noqa: E402
from alertbox.utils.errors import NotificationError  # noqa: E402


class RecordingTransport:
    """Notification transport that records sends instead of emailing.

    ``fail_for`` holds user ids whose sends raise ``NotificationError``.
    """

    def __init__(self, configured: bool = True) -> None:
        self.configured = configured
        self.sent: list[tuple[str, int, int]] = []
        self.fail_for: set[int] = set()

    def is_configured(self) -> bool:
        return self.configured

    def _record(self, kind: str, alert: AlertRead, user_id: int) -> None:
        if user_id in self.fail_for:
            raise NotificationError(f"mailbox unavailable for {user_id}")
        self.sent.append((kind, alert.id, user_id))

    def send_new_alert_created(self, alert):
        self._record("new_alert_created", alert, alert.creator_id)

    def send_admin_unsubscribed_user(self, alert, removed_user, acting_admin):
        self._record("admin_unsubscribed_user", alert, removed_user.id)

    def send_user_added(self, alert, added_user, acting_admin):
        self._record("user_added", alert, added_user.id)

    def send_user_unsubscribed_self(self, alert, user):
        self._record("user_unsubscribed_self", alert, user.user_id)

    def kinds_for(self, user_id: int) -> list[str]:
        return [kind for kind, _, recipient in self.sent if recipient == user_id]


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    session = factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture(autouse=True)
def override_dependencies(db_session: Session, transport: RecordingTransport) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notification_transport] = lambda: transport
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_notification_transport, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    asgi_transport = ASGITransport(app=app)
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# --- Factories -------------------------------------------------------------


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _factory(*, first_name: str = "User", is_superuser: bool = False, is_active: bool = True) -> User:
        user = User(
            email=f"{first_name.lower()}-{uuid4().hex[:8]}@example.com",
            first_name=first_name,
            is_superuser=is_superuser,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _factory


@pytest.fixture
def make_card(db_session: Session) -> Callable[..., Card]:
    def _factory(creator: User, *, is_shared: bool = True, archived: bool = False) -> Card:
        card = Card(name=f"Question {uuid4().hex[:6]}", creator_id=creator.id, is_shared=is_shared, archived=archived)
        db_session.add(card)
        db_session.commit()
        return card

    return _factory


@pytest.fixture
def make_alert(db_session: Session, make_card) -> Callable[..., Alert]:
    """Persist an alert with an email channel and, optionally, a chat channel."""

    def _factory(
        creator: User,
        recipients: list[User],
        *,
        card: Card | None = None,
        chat: bool = False,
        condition: AlertCondition = AlertCondition.rows,
    ) -> Alert:
        alert = Alert(
            creator_id=creator.id,
            card_id=(card or make_card(creator)).id,
            alert_condition=condition,
            alert_first_only=False,
        )
        alert.channels.append(
            AlertChannel(channel_type=ChannelType.email, schedule_type=ScheduleType.hourly, recipients=list(recipients))
        )
        if chat:
            alert.channels.append(
                AlertChannel(
                    channel_type=ChannelType.chat,
                    schedule_type=ScheduleType.hourly,
                    details={"channel": "#alerts"},
                )
            )
        db_session.add(alert)
        db_session.commit()
        return alert

    return _factory


def actor_for(user: User) -> Actor:
    return Actor.from_user(user)


def headers_for(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def as_actor() -> Callable[[User], Actor]:
    return actor_for


@pytest.fixture
def headers() -> Callable[[User], dict[str, str]]:
    return headers_for


# --- In-memory snapshots for the pure helpers -----------------------------


def _user_ref(user_id: int) -> UserRef:
    return UserRef(id=user_id, email=f"user{user_id}@example.com", first_name=f"User{user_id}")


@pytest.fixture
def make_snapshot() -> Callable[..., AlertRead]:
    """Build an ``AlertRead`` without touching the database."""

    def _factory(
        *,
        creator_id: int = 1,
        recipients: tuple[int, ...] | list[int] | set[int] = (),
        chat: bool = False,
        email: bool = True,
        alert_id: int = 1,
    ) -> AlertRead:
        channels: list[ChannelRead] = []
        if email:
            channels.append(
                ChannelRead(
                    id=10,
                    channel_type=ChannelType.email,
                    enabled=True,
                    schedule_type=ScheduleType.hourly,
                    recipients=[_user_ref(user_id) for user_id in sorted(recipients)],
                )
            )
        if chat:
            channels.append(
                ChannelRead(
                    id=11,
                    channel_type=ChannelType.chat,
                    enabled=True,
                    schedule_type=ScheduleType.hourly,
                    details={"channel": "#alerts"},
                )
            )
        now = datetime.now(tz=UTC)
        return AlertRead(
            id=alert_id,
            creator_id=creator_id,
            creator=_user_ref(creator_id),
            card=CardRef(id=1, name="Signups"),
            alert_condition=AlertCondition.rows,
            alert_first_only=False,
            channels=channels,
            created_at=now,
            updated_at=now,
        )

    return _factory
