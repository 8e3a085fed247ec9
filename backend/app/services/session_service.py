"""
Service métier pour les séances de cours.

Statut de confirmation :
  UNKNOWN → YES / NO   par l'élève concerné (accept / reject)
  * → UNKNOWN          dès que le tuteur change la date de la séance
"""

import logging
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ForbiddenError, InternalError, NotFoundError
from app.models.account import Account
from app.models.course import Course
from app.models.enums import ConfirmationStatus, NotificationType
from app.models.tutoring_session import HomeworkAssignment, TutoringSession
from app.schemas.tutoring_session import (
    HomeworkResponse,
    SessionCreate,
    SessionDetailResponse,
    SessionResponse,
    SessionUpdate,
)
from app.services import authorization as authz
from app.services import file_service, notification_service
from app.services.authorization import Action
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Séance introuvable."
COURSE_MISSING = "La séance référence un cours inexistant (base corrompue ?)."


def get_course_of(db: Session, session: TutoringSession) -> Course:
    course = db.get(Course, session.course_id)
    if course is None:
        raise InternalError(COURSE_MISSING)
    return course


def load_session(
    db: Session, principal: Account, session_id: int, action: Action
) -> Tuple[TutoringSession, Course]:
    """Charge une séance et son cours, puis vérifie l'accès (NotFound puis Forbidden)."""
    session = db.get(TutoringSession, session_id)
    if session is None:
        raise NotFoundError(NOT_FOUND)
    course = get_course_of(db, session)
    authz.require(
        authz.can_access_session(principal, action, session, course),
        "Vous n'avez pas accès à cette séance.",
        code="NOT_OWNER",
    )
    return session, course


def list_sessions(db: Session, principal: Account) -> List[TutoringSession]:
    """Tuteur : séances de ses cours. Élève : ses propres séances."""
    if principal.is_tutor:
        rows = db.execute(
            select(TutoringSession, Course)
            .join(Course, Course.id == TutoringSession.course_id)
            .where(Course.tutor_username == principal.username)
            .order_by(TutoringSession.session_date_time)
        ).all()
        allowed = authz.apply_list_policy(
            "sessions", rows, lambda r: authz.can_access_session(principal, Action.READ, r[0], r[1])
        )
        return [r[0] for r in allowed]

    rows = db.execute(
        select(TutoringSession)
        .where(TutoringSession.student_username == principal.username)
        .order_by(TutoringSession.session_date_time)
    ).scalars().all()
    return authz.apply_list_policy(
        "sessions", rows, lambda s: s.student_username == principal.username
    )


def get_session_detail(db: Session, principal: Account, session_id: int) -> SessionDetailResponse:
    """Séance avec la liste de ses devoirs."""
    session, _ = load_session(db, principal, session_id, Action.READ)
    homework = db.execute(
        select(HomeworkAssignment)
        .where(HomeworkAssignment.session_id == session_id)
        .order_by(HomeworkAssignment.id)
    ).scalars().all()

    base = SessionResponse.model_validate(session)
    return SessionDetailResponse(
        **base.model_dump(),
        homework_assignments=[HomeworkResponse.from_model(h) for h in homework],
    )


def create_session(db: Session, principal: Account, data: SessionCreate) -> TutoringSession:
    """
    Crée une séance dans un cours du tuteur et notifie l'élève.
    La séance et la notification sont enregistrées dans le même commit.
    """
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    if data.session_date_time < datetime.now():
        raise BadRequestError("Impossible de planifier une séance dans le passé.", code="DATE_IN_PAST")

    course = db.get(Course, data.course_id)
    if course is None:
        raise NotFoundError("Cours introuvable.")
    authz.require(
        course.tutor_username == principal.username,
        "Impossible d'ajouter une séance à un cours d'un autre tuteur.",
        code="NOT_OWNER",
    )

    student = db.get(Account, data.student_username)
    if student is None:
        raise NotFoundError("Élève introuvable.")
    if student.is_tutor:
        raise BadRequestError("Une séance doit concerner un élève.", code="NOT_A_STUDENT")

    session = TutoringSession(
        student_username=data.student_username,
        course_id=data.course_id,
        session_date_time=data.session_date_time,
        is_paid_for=data.is_paid_for,
        confirmation_status=ConfirmationStatus.UNKNOWN.value,
    )
    db.add(session)
    notification_service.emit(
        db,
        data.student_username,
        NotificationType.SESSION_CREATED,
        f"Le tuteur {principal.username} a planifié une nouvelle séance pour le cours {course.name}.",
    )
    db.commit()
    db.refresh(session)

    logger.info("Séance créée : %s (cours %s, élève %s)", session.id, course.id, session.student_username)
    return session


def update_session(db: Session, principal: Account, session_id: int, data: SessionUpdate) -> TutoringSession:
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    session, _ = load_session(db, principal, session_id, Action.UPDATE)

    if (data.course_id is not None and data.course_id != session.course_id) or (
        data.student_username is not None and data.student_username != session.student_username
    ):
        raise ForbiddenError("Le cours ou l'élève d'une séance ne peut pas être modifié.", code="IMMUTABLE_FIELD")
    if data.confirmation_status is not None and data.confirmation_status.value != session.confirmation_status:
        raise ForbiddenError(
            "Seul l'élève peut confirmer ou refuser une séance.", code="CONFIRMATION_BY_STUDENT_ONLY"
        )
    check_version(session, data.version)

    if data.is_paid_for is not None:
        session.is_paid_for = data.is_paid_for
    if data.session_date_time is not None and data.session_date_time != session.session_date_time:
        session.session_date_time = data.session_date_time
        session.confirmation_status = ConfirmationStatus.UNKNOWN.value

    commit_or_conflict(db, TutoringSession, session_id, NOT_FOUND)
    db.refresh(session)
    return session


def respond_to_session(db: Session, principal: Account, session_id: int, accept: bool) -> TutoringSession:
    """Acceptation ou refus par l'élève ; le tuteur du cours est notifié."""
    if principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_STUDENT, code="NOT_A_STUDENT")

    session = db.get(TutoringSession, session_id)
    if session is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(
        authz.can_respond_to_session(principal, session),
        "Impossible de répondre à la séance d'un autre élève.",
        code="NOT_OWNER",
    )
    if session.confirmation_status != ConfirmationStatus.UNKNOWN.value:
        raise BadRequestError("Cette séance a déjà été acceptée ou refusée.", code="ALREADY_ANSWERED")

    course = get_course_of(db, session)
    status = ConfirmationStatus.YES if accept else ConfirmationStatus.NO
    session.confirmation_status = status.value

    notification_service.emit(
        db,
        course.tutor_username,
        NotificationType.SESSION_ACCEPTED if accept else NotificationType.SESSION_REJECTED,
        f"L'élève {principal.username} a {'accepté' if accept else 'refusé'} la séance du cours {course.name}.",
    )
    commit_or_conflict(db, TutoringSession, session_id, NOT_FOUND)
    db.refresh(session)

    logger.info("Séance %s : réponse %s de %s", session_id, status.value, principal.username)
    return session


def delete_session(db: Session, principal: Account, session_id: int) -> None:
    """Supprime la séance et ses devoirs (fichiers de solution supprimés au mieux)."""
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    session, _ = load_session(db, principal, session_id, Action.DELETE)

    homework = db.execute(
        select(HomeworkAssignment).where(HomeworkAssignment.session_id == session_id)
    ).scalars().all()
    solution_files = [h.solution_file_name for h in homework if h.solution_file_name]
    for h in homework:
        db.delete(h)
    db.delete(session)
    commit_or_conflict(db, TutoringSession, session_id, NOT_FOUND)

    for file_id in solution_files:
        file_service.delete_file(file_id)
    logger.info("Séance supprimée : %s (%d devoirs)", session_id, len(homework))
