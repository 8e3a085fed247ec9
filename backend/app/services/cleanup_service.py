"""
Suppression automatique des comptes désactivés depuis plus de 14 jours.

Chaque compte est supprimé dans sa propre transaction : toutes ses données
dépendantes disparaissent avec lui, ou rien ne change. Un échec sur un compte
est journalisé et n'interrompt pas le traitement des suivants.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session, aliased

from app.config import settings
from app.models.account import Account, AccountCredential, AccountHistory
from app.models.communication import Message, Note, Notification
from app.models.course import Course, StudentCourse, TeachingMaterial
from app.models.enums import EventType
from app.models.payment import PaymentRecord
from app.models.tutoring_session import HomeworkAssignment, TutoringSession
from app.services import file_service

logger = logging.getLogger(__name__)


class CleanupReport(BaseModel):
    deleted: List[str] = []
    failed: List[str] = []


def find_accounts_to_delete(db: Session, now: Optional[datetime] = None) -> List[Account]:
    """Comptes dont le dernier événement est une désactivation antérieure à la date limite."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=settings.DEACTIVATION_RETENTION_DAYS)

    inner = aliased(AccountHistory)
    latest_event_id = (
        select(inner.id)
        .where(inner.account_username == Account.username)
        .order_by(inner.event_timestamp.desc(), inner.id.desc())
        .limit(1)
        .correlate(Account)
        .scalar_subquery()
    )
    return db.execute(
        select(Account)
        .join(AccountHistory, AccountHistory.account_username == Account.username)
        .where(
            AccountHistory.id == latest_event_id,
            AccountHistory.event_type == EventType.DEACTIVATION.value,
            AccountHistory.event_timestamp < cutoff,
        )
        .order_by(Account.username)
    ).scalars().all()


def _delete_sessions(db: Session, session_ids: List[int]) -> List[str]:
    """Supprime des séances et leurs devoirs ; retourne les fichiers de solution à effacer."""
    if not session_ids:
        return []
    files = db.execute(
        select(HomeworkAssignment.solution_file_name).where(
            HomeworkAssignment.session_id.in_(session_ids),
            HomeworkAssignment.solution_file_name.is_not(None),
        )
    ).scalars().all()
    db.execute(delete(HomeworkAssignment).where(HomeworkAssignment.session_id.in_(session_ids)))
    db.execute(delete(TutoringSession).where(TutoringSession.id.in_(session_ids)))
    return list(files)


def delete_account_data(db: Session, account: Account) -> None:
    """
    Supprime le compte et tout ce qui le référence, puis commit une seule fois.

    Ordre :
    1. Paiements et messages (comme l'une ou l'autre partie), notifications, notes
    2. Séances de l'élève (et leurs devoirs), inscriptions de l'élève
    3. Tuteur : séances, supports et inscriptions de ses cours, puis les cours
    4. Historique, identifiants, compte
    Les fichiers associés sont effacés au mieux après le commit.
    """
    username = account.username
    files: List[str] = []

    db.execute(
        delete(PaymentRecord).where(
            or_(PaymentRecord.student_username == username, PaymentRecord.tutor_username == username)
        )
    )
    message_party = or_(Message.sender_username == username, Message.recipient_username == username)
    files += db.execute(
        select(Message.attachment_file_name).where(message_party, Message.attachment_file_name.is_not(None))
    ).scalars().all()
    db.execute(delete(Message).where(message_party))
    db.execute(delete(Notification).where(Notification.account_username == username))
    db.execute(delete(Note).where(Note.account_username == username))

    own_sessions = db.execute(
        select(TutoringSession.id).where(TutoringSession.student_username == username)
    ).scalars().all()
    files += _delete_sessions(db, list(own_sessions))
    db.execute(delete(StudentCourse).where(StudentCourse.student_username == username))

    if account.is_tutor:
        course_ids = list(db.execute(
            select(Course.id).where(Course.tutor_username == username)
        ).scalars().all())
        if course_ids:
            course_sessions = db.execute(
                select(TutoringSession.id).where(TutoringSession.course_id.in_(course_ids))
            ).scalars().all()
            files += _delete_sessions(db, list(course_sessions))
            files += db.execute(
                select(TeachingMaterial.file_name).where(
                    TeachingMaterial.course_id.in_(course_ids), TeachingMaterial.file_name.is_not(None)
                )
            ).scalars().all()
            db.execute(delete(TeachingMaterial).where(TeachingMaterial.course_id.in_(course_ids)))
            db.execute(delete(StudentCourse).where(StudentCourse.course_id.in_(course_ids)))
            db.execute(delete(Course).where(Course.id.in_(course_ids)))

    credential = db.get(AccountCredential, username)
    if credential is not None and credential.profile_picture_file_name:
        files.append(credential.profile_picture_file_name)

    db.execute(delete(AccountHistory).where(AccountHistory.account_username == username))
    db.execute(delete(AccountCredential).where(AccountCredential.account_username == username))
    db.execute(delete(Account).where(Account.username == username))
    db.commit()

    for file_id in files:
        file_service.delete_file(file_id)


def run_cleanup(db: Session, now: Optional[datetime] = None) -> CleanupReport:
    report = CleanupReport()
    accounts = find_accounts_to_delete(db, now)
    if not accounts:
        logger.info("Nettoyage : aucun compte à supprimer.")
        return report

    logger.info("Nettoyage : %d compte(s) à supprimer.", len(accounts))
    usernames = [a.username for a in accounts]
    for username in usernames:
        account = db.get(Account, username)
        if account is None:
            continue
        try:
            delete_account_data(db, account)
        except Exception:
            db.rollback()
            logger.exception("Échec de la suppression du compte %s", username)
            report.failed.append(username)
        else:
            logger.info("Compte supprimé : %s", username)
            report.deleted.append(username)
    return report
