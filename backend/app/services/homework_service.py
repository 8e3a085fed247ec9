"""
Service métier pour les devoirs.

La visibilité d'un devoir est héritée de sa séance : le tuteur du cours et
l'élève de la séance. La solution est déposée une seule fois par l'élève.
"""

import logging
from pathlib import Path
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ForbiddenError, InternalError, NotFoundError
from app.models.account import Account
from app.models.course import Course
from app.models.enums import NotificationType
from app.models.tutoring_session import HomeworkAssignment, TutoringSession
from app.schemas.tutoring_session import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from app.services import authorization as authz
from app.services import file_service, notification_service
from app.services.authorization import Action
from app.services.persistence import check_version, commit_or_conflict
from app.services.session_service import get_course_of

logger = logging.getLogger(__name__)

NOT_FOUND = "Devoir introuvable."
SESSION_MISSING = "Le devoir référence une séance inexistante (base corrompue ?)."


def _load(
    db: Session, principal: Account, homework_id: int, action: Action
) -> Tuple[HomeworkAssignment, TutoringSession, Course]:
    homework = db.get(HomeworkAssignment, homework_id)
    if homework is None:
        raise NotFoundError(NOT_FOUND)
    session = db.get(TutoringSession, homework.session_id)
    if session is None:
        raise InternalError(SESSION_MISSING)
    course = get_course_of(db, session)
    authz.require(
        authz.can_access_homework(principal, action, session, course),
        "Vous n'avez pas accès à ce devoir.",
        code="NOT_OWNER",
    )
    return homework, session, course


def list_homework(db: Session, principal: Account) -> List[HomeworkResponse]:
    query = (
        select(HomeworkAssignment, TutoringSession, Course)
        .join(TutoringSession, TutoringSession.id == HomeworkAssignment.session_id)
        .join(Course, Course.id == TutoringSession.course_id)
        .order_by(HomeworkAssignment.id)
    )
    if principal.is_tutor:
        query = query.where(Course.tutor_username == principal.username)
    else:
        query = query.where(TutoringSession.student_username == principal.username)

    rows = authz.apply_list_policy(
        "homework",
        db.execute(query).all(),
        lambda r: authz.can_access_homework(principal, Action.READ, r[1], r[2]),
    )
    return [HomeworkResponse.from_model(r[0]) for r in rows]


def get_homework(db: Session, principal: Account, homework_id: int) -> HomeworkResponse:
    homework, _, _ = _load(db, principal, homework_id, Action.READ)
    return HomeworkResponse.from_model(homework)


def create_homework(db: Session, principal: Account, data: HomeworkCreate) -> HomeworkResponse:
    """Assigne un devoir à une séance du tuteur ; l'élève est notifié."""
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")

    session = db.get(TutoringSession, data.session_id)
    if session is None:
        raise NotFoundError("Séance introuvable.")
    course = get_course_of(db, session)
    authz.require(
        authz.can_access_homework(principal, Action.CREATE, session, course),
        "Impossible d'assigner un devoir dans le cours d'un autre tuteur.",
        code="NOT_OWNER",
    )

    homework = HomeworkAssignment(session_id=session.id, name=data.name, objective=data.objective)
    db.add(homework)
    notification_service.emit(
        db,
        session.student_username,
        NotificationType.HOMEWORK_ASSIGNED,
        f"Nouveau devoir « {data.name} » pour le cours {course.name}.",
    )
    db.commit()
    db.refresh(homework)

    logger.info("Devoir %s assigné (séance %s)", homework.id, session.id)
    return HomeworkResponse.from_model(homework)


def update_homework(db: Session, principal: Account, homework_id: int, data: HomeworkUpdate) -> HomeworkResponse:
    """Le tuteur modifie l'énoncé et rédige le retour sur la solution."""
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    homework, _, _ = _load(db, principal, homework_id, Action.UPDATE)
    check_version(homework, data.version)

    update_data = data.model_dump(exclude_unset=True, exclude={"version"})
    for field, value in update_data.items():
        setattr(homework, field, value)

    commit_or_conflict(db, HomeworkAssignment, homework_id, NOT_FOUND)
    db.refresh(homework)
    return HomeworkResponse.from_model(homework)


def delete_homework(db: Session, principal: Account, homework_id: int) -> None:
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    homework, _, _ = _load(db, principal, homework_id, Action.DELETE)
    solution = homework.solution_file_name

    db.delete(homework)
    commit_or_conflict(db, HomeworkAssignment, homework_id, NOT_FOUND)
    file_service.delete_file(solution)
    logger.info("Devoir supprimé : %s", homework_id)


def upload_solution(
    db: Session, principal: Account, homework_id: int, content: bytes, original_name: str
) -> HomeworkResponse:
    """
    Dépôt de la solution par l'élève de la séance. Aucun écrasement :
    une seconde tentative est refusée. Le tuteur du cours est notifié.
    """
    if principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_STUDENT, code="NOT_A_STUDENT")

    homework = db.get(HomeworkAssignment, homework_id)
    if homework is None:
        raise NotFoundError(NOT_FOUND)
    session = db.get(TutoringSession, homework.session_id)
    if session is None:
        raise InternalError(SESSION_MISSING)
    authz.require(
        authz.can_upload_solution(principal, session),
        "Impossible de déposer une solution pour le devoir d'un autre élève.",
        code="NOT_OWNER",
    )
    if homework.solution_file_name:
        raise BadRequestError("Une solution a déjà été déposée pour ce devoir.", code="SOLUTION_EXISTS")
    course = get_course_of(db, session)

    file_id = file_service.save_file(content, original_name)
    homework.solution_file_name = file_id
    notification_service.emit(
        db,
        course.tutor_username,
        NotificationType.HOMEWORK_SOLUTION_UPLOADED,
        f"L'élève {principal.username} a déposé une solution pour le devoir « {homework.name} ».",
    )
    try:
        commit_or_conflict(db, HomeworkAssignment, homework_id, NOT_FOUND)
    except Exception:
        file_service.delete_file(file_id)
        raise
    db.refresh(homework)

    logger.info("Solution déposée pour le devoir %s par %s", homework_id, principal.username)
    return HomeworkResponse.from_model(homework)


def get_solution_file(db: Session, principal: Account, homework_id: int) -> Tuple[Path, str]:
    """Retourne (chemin, nom d'origine) de la solution déposée."""
    homework, _, _ = _load(db, principal, homework_id, Action.READ)
    if not homework.solution_file_name:
        raise NotFoundError("Aucune solution déposée pour ce devoir.", code="NO_SOLUTION")
    path = file_service.open_stored_file(homework.solution_file_name)
    return path, file_service.original_name(homework.solution_file_name)
