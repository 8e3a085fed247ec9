"""
Router pour les notifications (consultation par interrogation, pas de push).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.communication import NotificationResponse
from app.services import notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse], summary="Mes notifications")
def list_notifications(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """De la plus récente à la plus ancienne."""
    return notification_service.list_notifications(db, current)


@router.get("/{notification_id}", response_model=NotificationResponse, summary="Détail d'une notification")
def get_notification(
    notification_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)
):
    return notification_service.get_notification(db, current, notification_id)


@router.delete("/{notification_id}", status_code=204, summary="Supprimer une notification")
def delete_notification(
    notification_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)
):
    notification_service.delete_notification(db, current, notification_id)
