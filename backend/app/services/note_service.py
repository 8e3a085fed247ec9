"""
Service métier pour les notes personnelles.
Strictement privées : même un tuteur ne lit pas les notes d'un élève.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError
from app.models.account import Account
from app.models.communication import Note
from app.schemas.communication import NoteCreate, NoteUpdate
from app.services import authorization as authz
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Note introuvable."
NOT_OWNER = "Cette note ne vous appartient pas."


def _load(db: Session, principal: Account, note_id: int) -> Note:
    note = db.get(Note, note_id)
    if note is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(authz.can_access_note(principal, note), NOT_OWNER, code="NOT_OWNER")
    return note


def list_notes(db: Session, principal: Account) -> List[Note]:
    rows = db.execute(
        select(Note)
        .where(Note.account_username == principal.username)
        .order_by(Note.date.desc(), Note.id.desc())
    ).scalars().all()
    return authz.apply_list_policy("notes", rows, lambda n: authz.can_access_note(principal, n))


def get_note(db: Session, principal: Account, note_id: int) -> Note:
    return _load(db, principal, note_id)


def create_note(db: Session, principal: Account, data: NoteCreate) -> Note:
    if data.account_username != principal.username:
        raise ForbiddenError("Impossible de créer une note pour un autre utilisateur.", code="NOT_OWNER")

    note = Note(account_username=principal.username, date=data.date, body=data.body)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


def update_note(db: Session, principal: Account, note_id: int, data: NoteUpdate) -> Note:
    note = _load(db, principal, note_id)
    if data.account_username is not None and data.account_username != note.account_username:
        raise ForbiddenError("Le propriétaire d'une note ne peut pas être modifié.", code="IMMUTABLE_FIELD")
    check_version(note, data.version)

    if data.date is not None:
        note.date = data.date
    if data.body is not None:
        note.body = data.body

    commit_or_conflict(db, Note, note_id, NOT_FOUND)
    db.refresh(note)
    return note


def delete_note(db: Session, principal: Account, note_id: int) -> None:
    note = _load(db, principal, note_id)
    db.delete(note)
    commit_or_conflict(db, Note, note_id, NOT_FOUND)
