"""
Router pour les supports de cours (fichiers rattachés à un cours).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.course import TeachingMaterialResponse, TeachingMaterialUpdate
from app.services import file_service, teaching_material_service

router = APIRouter(prefix="/api/v1/teaching-materials", tags=["Supports de cours"])


@router.get("", response_model=List[TeachingMaterialResponse], summary="Lister les supports")
def list_materials(
    course_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return teaching_material_service.list_materials(db, current, course_id)


@router.get("/{material_id}", response_model=TeachingMaterialResponse, summary="Détail d'un support")
def get_material(material_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return teaching_material_service.get_material(db, current, material_id)


@router.post("", response_model=TeachingMaterialResponse, status_code=201, summary="Ajouter un support")
def create_material(
    course_id: int = Form(...),
    name: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    content = file_service.read_upload(file.file)
    return teaching_material_service.create_material(db, current, course_id, name, content, file.filename or "")


@router.put("/{material_id}", response_model=TeachingMaterialResponse, summary="Renommer un support")
def update_material(
    material_id: int,
    data: TeachingMaterialUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return teaching_material_service.update_material(db, current, material_id, data)


@router.delete("/{material_id}", status_code=204, summary="Supprimer un support")
def delete_material(material_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    teaching_material_service.delete_material(db, current, material_id)


@router.get("/{material_id}/file", summary="Télécharger le fichier d'un support")
def download_material(material_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    path, filename = teaching_material_service.get_material_file(db, current, material_id)
    return FileResponse(path, media_type="application/octet-stream", filename=filename)
