"""
Router pour les devoirs : CRUD par le tuteur, dépôt et téléchargement de la solution.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.tutoring_session import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from app.services import file_service, homework_service

router = APIRouter(prefix="/api/v1/homework", tags=["Devoirs"])


@router.get("", response_model=List[HomeworkResponse], summary="Lister les devoirs")
def list_homework(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return homework_service.list_homework(db, current)


@router.get("/{homework_id}", response_model=HomeworkResponse, summary="Détail d'un devoir")
def get_homework(homework_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return homework_service.get_homework(db, current, homework_id)


@router.post("", response_model=HomeworkResponse, status_code=201, summary="Assigner un devoir")
def create_homework(data: HomeworkCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return homework_service.create_homework(db, current, data)


@router.put("/{homework_id}", response_model=HomeworkResponse, summary="Modifier un devoir")
def update_homework(
    homework_id: int,
    data: HomeworkUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return homework_service.update_homework(db, current, homework_id, data)


@router.delete("/{homework_id}", status_code=204, summary="Supprimer un devoir")
def delete_homework(homework_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    homework_service.delete_homework(db, current, homework_id)


@router.post("/{homework_id}/solution", response_model=HomeworkResponse, summary="Déposer la solution")
def upload_solution(
    homework_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    """Réservé à l'élève de la séance. Une solution déjà déposée n'est jamais remplacée."""
    content = file_service.read_upload(file.file)
    return homework_service.upload_solution(db, current, homework_id, content, file.filename or "")


@router.get("/{homework_id}/solution", summary="Télécharger la solution")
def download_solution(homework_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    path, filename = homework_service.get_solution_file(db, current, homework_id)
    return FileResponse(path, media_type="application/octet-stream", filename=filename)
