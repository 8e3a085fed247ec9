"""
Service métier pour la messagerie entre comptes.
Un message n'est visible que par son expéditeur et son destinataire.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, NotFoundError
from app.models.account import Account
from app.models.communication import Message
from app.models.enums import NotificationType
from app.services import authorization as authz
from app.services import file_service, notification_service

logger = logging.getLogger(__name__)

NOT_FOUND = "Message introuvable."


def list_received(db: Session, principal: Account) -> List[Message]:
    rows = db.execute(
        select(Message)
        .where(Message.recipient_username == principal.username)
        .order_by(Message.sent_on.desc(), Message.id.desc())
    ).scalars().all()
    return authz.apply_list_policy("messages", rows, lambda m: authz.can_access_message(principal, m))


def list_sent(db: Session, principal: Account) -> List[Message]:
    rows = db.execute(
        select(Message)
        .where(Message.sender_username == principal.username)
        .order_by(Message.sent_on.desc(), Message.id.desc())
    ).scalars().all()
    return authz.apply_list_policy("messages", rows, lambda m: authz.can_access_message(principal, m))


def get_message(db: Session, principal: Account, message_id: int) -> Message:
    message = db.get(Message, message_id)
    if message is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(
        authz.can_access_message(principal, message),
        "Ce message ne vous appartient pas.",
        code="NOT_OWNER",
    )
    return message


def send_message(
    db: Session,
    principal: Account,
    recipient_username: str,
    topic: str,
    body: str = "",
    attachment: Optional[Tuple[bytes, str]] = None,
) -> Message:
    """
    Envoie un message, avec pièce jointe facultative (contenu, nom d'origine).
    Le destinataire reçoit une notification MESSAGE_RECEIVED dans le même commit.
    """
    if recipient_username == principal.username:
        raise BadRequestError("Impossible de s'envoyer un message à soi-même.", code="SELF_MESSAGE")
    if not topic or not topic.strip():
        raise BadRequestError("Le sujet du message ne peut pas être vide.", code="EMPTY_TOPIC")
    if db.get(Account, recipient_username) is None:
        raise NotFoundError("Destinataire introuvable.")

    message = Message(
        sender_username=principal.username,
        recipient_username=recipient_username,
        topic=topic.strip(),
        body=body or "",
        sent_on=datetime.now(),
    )
    if attachment is not None:
        content, original_name = attachment
        message.attachment_file_name = file_service.save_file(content, original_name)

    db.add(message)
    notification_service.emit(
        db,
        recipient_username,
        NotificationType.MESSAGE_RECEIVED,
        f"Vous avez reçu un nouveau message de {principal.username}.",
    )
    try:
        db.commit()
    except Exception:
        db.rollback()
        file_service.delete_file(message.attachment_file_name)
        raise
    db.refresh(message)

    logger.info("Message %s envoyé de %s à %s", message.id, principal.username, recipient_username)
    return message


def get_attachment(db: Session, principal: Account, message_id: int) -> Tuple[Path, str]:
    message = get_message(db, principal, message_id)
    if not message.attachment_file_name:
        raise NotFoundError("Ce message n'a pas de pièce jointe.", code="NO_ATTACHMENT")
    path = file_service.open_stored_file(message.attachment_file_name)
    return path, file_service.original_name(message.attachment_file_name)
