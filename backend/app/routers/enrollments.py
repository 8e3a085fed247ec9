"""
Router pour les inscriptions élève ↔ cours.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.course import EnrollmentCreate, EnrollmentResponse, EnrollmentUpdate
from app.services import enrollment_service

router = APIRouter(prefix="/api/v1/enrollments", tags=["Inscriptions"])


@router.get("", response_model=List[EnrollmentResponse], summary="Mes inscriptions (élève)")
def list_my_enrollments(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return enrollment_service.list_own_enrollments(db, current)


@router.get("/courses/{course_id}", response_model=List[EnrollmentResponse], summary="Élèves inscrits à un cours")
def list_course_enrollments(
    course_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)
):
    return enrollment_service.list_course_enrollments(db, current, course_id)


@router.get("/{course_id}/{student_username}", response_model=EnrollmentResponse, summary="Détail d'une inscription")
def get_enrollment(
    course_id: int,
    student_username: str,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return enrollment_service.get_enrollment(db, current, course_id, student_username)


@router.post("", response_model=EnrollmentResponse, status_code=201, summary="Inscrire un élève")
def create_enrollment(
    data: EnrollmentCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)
):
    """Réservé au tuteur du cours. La date de fin ne peut pas être passée."""
    return enrollment_service.create_enrollment(db, current, data)


@router.put("/{course_id}/{student_username}", response_model=EnrollmentResponse, summary="Modifier une inscription")
def update_enrollment(
    course_id: int,
    student_username: str,
    data: EnrollmentUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return enrollment_service.update_enrollment(db, current, course_id, student_username, data)


@router.delete("/{course_id}/{student_username}", status_code=204, summary="Désinscrire un élève")
def delete_enrollment(
    course_id: int,
    student_username: str,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    enrollment_service.delete_enrollment(db, current, course_id, student_username)
