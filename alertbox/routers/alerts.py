"""Alert endpoints."""
from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from alertbox.db import get_db
from alertbox.schemas.alert import AlertCreate, AlertRead, AlertUpdate, AlertWithPermissions
from alertbox.schemas.user import Actor
from alertbox.security import require_actor
from alertbox.services import alerts as alert_service
from alertbox.services.notifications import (
    NotificationTransport,
    dispatch_notifications,
    get_notification_transport,
)

router = APIRouter(prefix="/alert", tags=["alerts"])


@router.get("", response_model=list[AlertWithPermissions])
def list_alerts(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[AlertWithPermissions]:
    """Fetch all alerts visible to the caller."""

    return alert_service.list_alerts(db, actor)


@router.get("/question/{card_id}", response_model=list[AlertWithPermissions])
def list_alerts_for_question(
    card_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[AlertWithPermissions]:
    return alert_service.list_alerts_for_card(db, actor, card_id)


@router.get("/{alert_id}", response_model=AlertWithPermissions)
def get_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> AlertWithPermissions:
    return alert_service.get_alert(db, actor, alert_id)


@router.post("", response_model=AlertRead, status_code=status.HTTP_201_CREATED)
def create_alert(
    payload: AlertCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
    transport: NotificationTransport = Depends(get_notification_transport),
) -> AlertRead:
    """Create a new alert owned by the caller."""

    alert, jobs = alert_service.create_alert(db, actor, payload, transport)
    if jobs:
        background_tasks.add_task(dispatch_notifications, transport, jobs)
    return alert


@router.put("/{alert_id}", response_model=AlertRead)
def update_alert(
    alert_id: int,
    payload: AlertUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
    transport: NotificationTransport = Depends(get_notification_transport),
) -> AlertRead:
    alert, jobs = alert_service.update_alert(db, actor, alert_id, payload, transport)
    if jobs:
        background_tasks.add_task(dispatch_notifications, transport, jobs)
    return alert


@router.put("/{alert_id}/unsubscribe", status_code=status.HTTP_204_NO_CONTENT)
def unsubscribe_from_alert(
    alert_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
    transport: NotificationTransport = Depends(get_notification_transport),
) -> Response:
    """Stop receiving an alert; deletes it when the caller was its only audience."""

    _, jobs = alert_service.unsubscribe(db, actor, alert_id, transport)
    if jobs:
        background_tasks.add_task(dispatch_notifications, transport, jobs)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    alert_service.delete_alert(db, actor, alert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
