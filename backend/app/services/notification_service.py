"""
Notifications persistées (pas de push : le client interroge la liste).

emit() ajoute la notification à la session SQLAlchemy sans commit : elle est
enregistrée par le commit de l'opération qui l'a déclenchée, et annulée avec elle.
"""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.account import Account
from app.models.communication import Notification
from app.models.enums import NotificationType
from app.services import authorization as authz

logger = logging.getLogger(__name__)

NOT_FOUND = "Notification introuvable."


def emit(db: Session, username: str, notification_type: NotificationType, message: str) -> Notification:
    notification = Notification(
        account_username=username,
        notification_type=notification_type.value,
        message=message,
        notification_time=datetime.now(),
    )
    db.add(notification)
    logger.info("Notification %s préparée pour %s", notification_type.value, username)
    return notification


def list_notifications(db: Session, principal: Account) -> List[Notification]:
    """Notifications du compte courant, de la plus récente à la plus ancienne."""
    rows = db.execute(
        select(Notification)
        .where(Notification.account_username == principal.username)
        .order_by(Notification.notification_time.desc(), Notification.id.desc())
    ).scalars().all()
    return authz.apply_list_policy("notifications", rows, lambda n: authz.can_access_notification(principal, n))


def get_notification(db: Session, principal: Account, notification_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(
        authz.can_access_notification(principal, notification),
        "Impossible de consulter les notifications d'un autre utilisateur.",
    )
    return notification


def delete_notification(db: Session, principal: Account, notification_id: int) -> None:
    notification = get_notification(db, principal, notification_id)
    db.delete(notification)
    db.commit()
