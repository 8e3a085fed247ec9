"""
Router pour la messagerie : boîtes de réception et d'envoi, envoi avec pièce jointe.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.communication import MessageResponse
from app.services import file_service, message_service

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


@router.get("/received", response_model=List[MessageResponse], summary="Messages reçus")
def list_received(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return message_service.list_received(db, current)


@router.get("/sent", response_model=List[MessageResponse], summary="Messages envoyés")
def list_sent(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return message_service.list_sent(db, current)


@router.get("/{message_id}", response_model=MessageResponse, summary="Détail d'un message")
def get_message(message_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return message_service.get_message(db, current, message_id)


@router.post("", response_model=MessageResponse, status_code=201, summary="Envoyer un message")
def send_message(
    recipient_username: str = Form(...),
    topic: str = Form(...),
    body: str = Form(""),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    """Formulaire multipart ; la pièce jointe est facultative."""
    attachment = None
    if file is not None:
        attachment = (file_service.read_upload(file.file), file.filename or "")
    return message_service.send_message(db, current, recipient_username, topic, body, attachment)


@router.get("/{message_id}/attachment", summary="Télécharger la pièce jointe")
def download_attachment(message_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    path, filename = message_service.get_attachment(db, current, message_id)
    return FileResponse(path, media_type="application/octet-stream", filename=filename)
