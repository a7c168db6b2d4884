from alertbox.schemas.user import Actor
from alertbox.services.permissions import can_delete, can_read, can_unsubscribe, can_write


def _actor(user_id: int, *, superuser: bool = False) -> Actor:
    return Actor(user_id=user_id, is_superuser=superuser)


def test_recipient_can_read_but_not_write(make_snapshot):
    alert = make_snapshot(creator_id=1, recipients={1, 2})
    recipient = _actor(2)

    assert can_read(recipient, alert)
    assert not can_write(recipient, alert)
    assert can_unsubscribe(recipient, alert)
    assert not can_delete(recipient, alert)


def test_outsider_has_no_access(make_snapshot):
    alert = make_snapshot(creator_id=1, recipients={1, 2})
    outsider = _actor(3)

    assert not can_read(outsider, alert)
    assert not can_write(outsider, alert)
    assert not can_unsubscribe(outsider, alert)
    assert not can_delete(outsider, alert)


def test_creator_who_left_recipients_loses_write(make_snapshot):
    alert = make_snapshot(creator_id=1, recipients={2})

    creator = _actor(1)
    assert can_read(creator, alert)
    assert not can_write(creator, alert)
    assert can_delete(creator, alert)

    assert can_write(_actor(1, superuser=True), alert)


def test_creator_recipient_has_full_access(make_snapshot):
    alert = make_snapshot(creator_id=1, recipients={1})
    creator = _actor(1)

    assert can_read(creator, alert)
    assert can_write(creator, alert)
    assert can_unsubscribe(creator, alert)
    assert can_delete(creator, alert)


def test_superuser_can_never_unsubscribe(make_snapshot):
    admin = _actor(9, superuser=True)
    alerts = [
        make_snapshot(creator_id=9, recipients={9}),
        make_snapshot(creator_id=1, recipients={1, 9}, chat=True),
        make_snapshot(creator_id=1, recipients=set()),
        make_snapshot(creator_id=1, email=False, chat=True),
    ]

    for alert in alerts:
        assert not can_unsubscribe(admin, alert)
        assert can_read(admin, alert)
        assert can_write(admin, alert)
        assert can_delete(admin, alert)
