"""
Service métier pour les inscriptions élève ↔ cours (StudentCourse).
"""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.account import Account
from app.models.course import Course, StudentCourse
from app.schemas.course import EnrollmentCreate, EnrollmentUpdate
from app.services import authorization as authz
from app.services.authorization import Action
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Inscription introuvable."
COURSE_NOT_FOUND = "Cours introuvable."
END_DATE_IN_PAST = "La date de fin d'inscription ne peut pas être dans le passé."


def _get_course(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError(COURSE_NOT_FOUND)
    return course


def _check_end_date(end_date: datetime) -> None:
    if end_date < datetime.now():
        raise BadRequestError(END_DATE_IN_PAST, code="END_DATE_IN_PAST")


def list_own_enrollments(db: Session, principal: Account) -> List[StudentCourse]:
    """Inscriptions de l'élève connecté. Refusé à un tuteur."""
    if principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_STUDENT, code="NOT_A_STUDENT")
    rows = db.execute(
        select(StudentCourse)
        .where(StudentCourse.student_username == principal.username)
        .order_by(StudentCourse.course_id)
    ).scalars().all()
    return authz.apply_list_policy(
        "student_enrollments", rows, lambda e: e.student_username == principal.username
    )


def list_course_enrollments(db: Session, principal: Account, course_id: int) -> List[StudentCourse]:
    """Liste des élèves inscrits à un cours : réservée au tuteur du cours."""
    course = _get_course(db, course_id)
    authz.require(
        authz.can_access_enrollment(principal, Action.UPDATE, "", course),
        "Seul le tuteur du cours peut consulter ses inscriptions.",
        code="NOT_OWNER",
    )
    rows = db.execute(
        select(StudentCourse)
        .where(StudentCourse.course_id == course_id)
        .order_by(StudentCourse.student_username)
    ).scalars().all()
    return authz.apply_list_policy(
        "course_enrollments",
        rows,
        lambda e: authz.can_access_enrollment(principal, Action.READ, e.student_username, course),
    )


def _load_enrollment(
    db: Session, principal: Account, course_id: int, student_username: str, action: Action
) -> StudentCourse:
    course = _get_course(db, course_id)
    enrollment = db.get(StudentCourse, (student_username, course_id))
    if enrollment is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(
        authz.can_access_enrollment(principal, action, student_username, course),
        "Vous n'avez pas accès à cette inscription.",
        code="NOT_OWNER",
    )
    return enrollment


def get_enrollment(db: Session, principal: Account, course_id: int, student_username: str) -> StudentCourse:
    return _load_enrollment(db, principal, course_id, student_username, Action.READ)


def create_enrollment(db: Session, principal: Account, data: EnrollmentCreate) -> StudentCourse:
    course = _get_course(db, data.course_id)
    student = db.get(Account, data.student_username)
    if student is None:
        raise NotFoundError("Élève introuvable.")

    authz.require(
        authz.can_access_enrollment(principal, Action.CREATE, data.student_username, course),
        "Seul le tuteur du cours peut y inscrire un élève.",
        code="NOT_OWNER",
    )
    if student.is_tutor:
        raise BadRequestError("Seul un élève peut être inscrit à un cours.", code="NOT_A_STUDENT")
    _check_end_date(data.end_date)

    if db.get(StudentCourse, (data.student_username, data.course_id)) is not None:
        raise ConflictError("Cet élève est déjà inscrit à ce cours.", code="ALREADY_ENROLLED")

    enrollment = StudentCourse(
        student_username=data.student_username,
        course_id=data.course_id,
        frequency=data.frequency,
        end_date=data.end_date,
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)

    logger.info("Élève %s inscrit au cours %s", data.student_username, data.course_id)
    return enrollment


def update_enrollment(
    db: Session, principal: Account, course_id: int, student_username: str, data: EnrollmentUpdate
) -> StudentCourse:
    enrollment = _load_enrollment(db, principal, course_id, student_username, Action.UPDATE)

    if data.student_username is not None and data.student_username != student_username:
        raise ForbiddenError("L'élève d'une inscription ne peut pas être modifié.", code="IMMUTABLE_FIELD")
    if data.course_id is not None and data.course_id != course_id:
        raise ForbiddenError("Le cours d'une inscription ne peut pas être modifié.", code="IMMUTABLE_FIELD")
    if data.end_date is not None:
        _check_end_date(data.end_date)
    check_version(enrollment, data.version)

    if data.frequency is not None:
        enrollment.frequency = data.frequency
    if data.end_date is not None:
        enrollment.end_date = data.end_date

    commit_or_conflict(db, StudentCourse, (student_username, course_id), NOT_FOUND)
    db.refresh(enrollment)
    return enrollment


def delete_enrollment(db: Session, principal: Account, course_id: int, student_username: str) -> None:
    """Désinscription : par le tuteur du cours ou par l'élève lui-même."""
    enrollment = _load_enrollment(db, principal, course_id, student_username, Action.DELETE)
    db.delete(enrollment)
    commit_or_conflict(db, StudentCourse, (student_username, course_id), NOT_FOUND)
    logger.info("Inscription supprimée : %s / cours %s par %s", student_username, course_id, principal.username)
