"""
Router pour les séances de cours : CRUD et réponse de l'élève (accepter / refuser).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.tutoring_session import SessionCreate, SessionDetailResponse, SessionResponse, SessionUpdate
from app.services import session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Séances"])


@router.get("", response_model=List[SessionResponse], summary="Lister les séances")
def list_sessions(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return session_service.list_sessions(db, current)


@router.get("/{session_id}", response_model=SessionDetailResponse, summary="Détail d'une séance")
def get_session(session_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """Inclut les devoirs de la séance."""
    return session_service.get_session_detail(db, current, session_id)


@router.post("", response_model=SessionResponse, status_code=201, summary="Planifier une séance")
def create_session(data: SessionCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """La date doit être dans le futur ; l'élève est notifié."""
    return session_service.create_session(db, current, data)


@router.put("/{session_id}", response_model=SessionResponse, summary="Modifier une séance")
def update_session(
    session_id: int,
    data: SessionUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    """
    Le cours, l'élève et le statut de confirmation ne sont pas modifiables ici.
    Un changement de date remet le statut à UNKNOWN.
    """
    return session_service.update_session(db, current, session_id, data)


@router.post("/{session_id}/accept", response_model=SessionResponse, summary="Accepter une séance")
def accept_session(session_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return session_service.respond_to_session(db, current, session_id, accept=True)


@router.post("/{session_id}/reject", response_model=SessionResponse, summary="Refuser une séance")
def reject_session(session_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return session_service.respond_to_session(db, current, session_id, accept=False)


@router.delete("/{session_id}", status_code=204, summary="Supprimer une séance")
def delete_session(session_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    session_service.delete_session(db, current, session_id)
