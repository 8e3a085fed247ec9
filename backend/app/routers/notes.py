"""
Router pour les notes personnelles.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.communication import NoteCreate, NoteResponse, NoteUpdate
from app.services import note_service

router = APIRouter(prefix="/api/v1/notes", tags=["Notes"])


@router.get("", response_model=List[NoteResponse], summary="Lister mes notes")
def list_notes(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return note_service.list_notes(db, current)


@router.get("/{note_id}", response_model=NoteResponse, summary="Détail d'une note")
def get_note(note_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return note_service.get_note(db, current, note_id)


@router.post("", response_model=NoteResponse, status_code=201, summary="Créer une note")
def create_note(data: NoteCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return note_service.create_note(db, current, data)


@router.put("/{note_id}", response_model=NoteResponse, summary="Modifier une note")
def update_note(
    note_id: int,
    data: NoteUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return note_service.update_note(db, current, note_id, data)


@router.delete("/{note_id}", status_code=204, summary="Supprimer une note")
def delete_note(note_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    note_service.delete_note(db, current, note_id)
