"""
Service métier pour les cours.
Un tuteur ne gère que ses propres cours ; un élève ne voit que les cours
auxquels il est inscrit.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.account import Account
from app.models.course import Course, StudentCourse, TeachingMaterial
from app.models.tutoring_session import TutoringSession
from app.schemas.course import CourseCreate, CourseUpdate
from app.services import authorization as authz
from app.services.authorization import Action
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Cours introuvable."


def is_enrolled(db: Session, student_username: str, course_id: int) -> bool:
    return db.get(StudentCourse, (student_username, course_id)) is not None


def load_course(db: Session, principal: Account, course_id: int, action: Action) -> Course:
    """Charge un cours et vérifie le droit d'accès (NotFound puis Forbidden)."""
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError(NOT_FOUND)
    enrolled = not principal.is_tutor and is_enrolled(db, principal.username, course_id)
    authz.require(
        authz.can_access_course(principal, action, course, enrolled),
        "Vous n'avez pas accès à ce cours.",
        code="NOT_OWNER",
    )
    return course


def list_courses(db: Session, principal: Account) -> List[Course]:
    if principal.is_tutor:
        rows = db.execute(
            select(Course).where(Course.tutor_username == principal.username).order_by(Course.name)
        ).scalars().all()
        return authz.apply_list_policy(
            "courses", rows, lambda c: authz.can_access_course(principal, Action.READ, c)
        )

    rows = db.execute(
        select(Course)
        .join(StudentCourse, StudentCourse.course_id == Course.id)
        .where(StudentCourse.student_username == principal.username)
        .order_by(Course.name)
    ).scalars().all()
    return authz.apply_list_policy(
        "courses", rows, lambda c: authz.can_access_course(principal, Action.READ, c, True)
    )


def get_course(db: Session, principal: Account, course_id: int) -> Course:
    return load_course(db, principal, course_id, Action.READ)


def create_course(db: Session, principal: Account, data: CourseCreate) -> Course:
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    authz.require(
        authz.can_create_course(principal, data.tutor_username),
        "Impossible de créer un cours au nom d'un autre tuteur.",
        code="NOT_OWNER",
    )

    course = Course(
        tutor_username=data.tutor_username,
        name=data.name,
        price_per_session=data.price_per_session,
        description=data.description,
    )
    db.add(course)
    db.commit()
    db.refresh(course)

    logger.info("Cours créé : %s (%s) par %s", course.name, course.id, principal.username)
    return course


def update_course(db: Session, principal: Account, course_id: int, data: CourseUpdate) -> Course:
    course = load_course(db, principal, course_id, Action.UPDATE)

    if data.tutor_username is not None and data.tutor_username != course.tutor_username:
        raise ForbiddenError("Le tuteur d'un cours ne peut pas être modifié.", code="IMMUTABLE_FIELD")
    check_version(course, data.version)

    update_data = data.model_dump(exclude_unset=True, exclude={"tutor_username", "version"})
    for field, value in update_data.items():
        setattr(course, field, value)

    commit_or_conflict(db, Course, course_id, NOT_FOUND)
    db.refresh(course)
    return course


def delete_course(db: Session, principal: Account, course_id: int) -> None:
    """
    Suppression refusée tant que des séances, inscriptions ou supports
    référencent le cours.
    """
    course = load_course(db, principal, course_id, Action.DELETE)

    for model in (TutoringSession, StudentCourse, TeachingMaterial):
        count = db.execute(
            select(func.count()).select_from(model).where(model.course_id == course_id)
        ).scalar()
        if count:
            raise ConflictError(
                "Ce cours est encore utilisé (séances, inscriptions ou supports).",
                code="COURSE_IN_USE",
            )

    db.delete(course)
    commit_or_conflict(db, Course, course_id, NOT_FOUND)
    logger.info("Cours supprimé : %s par %s", course_id, principal.username)
