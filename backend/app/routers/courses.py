"""
Router pour les cours.
CRUD complet, restreint au tuteur propriétaire (lecture aussi pour les élèves inscrits).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from app.services import course_service

router = APIRouter(prefix="/api/v1/courses", tags=["Cours"])


@router.get("", response_model=List[CourseResponse], summary="Lister les cours")
def list_courses(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """Tuteur : ses cours. Élève : les cours auxquels il est inscrit."""
    return course_service.list_courses(db, current)


@router.get("/{course_id}", response_model=CourseResponse, summary="Détail d'un cours")
def get_course(course_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return course_service.get_course(db, current, course_id)


@router.post("", response_model=CourseResponse, status_code=201, summary="Créer un cours")
def create_course(data: CourseCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """tutor_username doit être celui du tuteur connecté."""
    return course_service.create_course(db, current, data)


@router.put("/{course_id}", response_model=CourseResponse, summary="Modifier un cours")
def update_course(
    course_id: int,
    data: CourseUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return course_service.update_course(db, current, course_id, data)


@router.delete("/{course_id}", status_code=204, summary="Supprimer un cours")
def delete_course(course_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    course_service.delete_course(db, current, course_id)
