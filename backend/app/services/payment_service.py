"""
Service métier pour les paiements élève → tuteur.
Lecture par l'une ou l'autre partie, écriture par le tuteur nommé uniquement.
"""

import logging
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.account import Account
from app.models.payment import PaymentRecord
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services import authorization as authz
from app.services.authorization import Action
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Paiement introuvable."


def _load(db: Session, principal: Account, payment_id: int, action: Action) -> PaymentRecord:
    record = db.get(PaymentRecord, payment_id)
    if record is None:
        raise NotFoundError(NOT_FOUND)
    authz.require(
        authz.can_access_payment(principal, action, record),
        "Vous n'avez pas accès à ce paiement.",
        code="NOT_OWNER",
    )
    return record


def list_payments(db: Session, principal: Account) -> List[PaymentRecord]:
    rows = db.execute(
        select(PaymentRecord)
        .where(
            or_(
                PaymentRecord.tutor_username == principal.username,
                PaymentRecord.student_username == principal.username,
            )
        )
        .order_by(PaymentRecord.paid_on.desc(), PaymentRecord.id.desc())
    ).scalars().all()
    return authz.apply_list_policy(
        "payments", rows, lambda r: authz.can_access_payment(principal, Action.READ, r)
    )


def get_payment(db: Session, principal: Account, payment_id: int) -> PaymentRecord:
    return _load(db, principal, payment_id, Action.READ)


def create_payment(db: Session, principal: Account, data: PaymentCreate) -> PaymentRecord:
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    if data.tutor_username != principal.username:
        raise ForbiddenError("Impossible d'enregistrer un paiement pour un autre tuteur.", code="NOT_OWNER")

    student = db.get(Account, data.student_username)
    if student is None:
        raise NotFoundError("Élève introuvable.")
    if student.is_tutor:
        raise BadRequestError("Un paiement doit provenir d'un élève.", code="NOT_A_STUDENT")

    record = PaymentRecord(
        student_username=data.student_username,
        tutor_username=data.tutor_username,
        amount_paid=data.amount_paid,
        means_of_payment=data.means_of_payment.value,
        paid_on=data.paid_on,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("Paiement %s enregistré : %s → %s", record.id, record.student_username, record.tutor_username)
    return record


def update_payment(db: Session, principal: Account, payment_id: int, data: PaymentUpdate) -> PaymentRecord:
    """Seuls le montant, le moyen et la date sont modifiables."""
    record = _load(db, principal, payment_id, Action.UPDATE)

    if (data.student_username is not None and data.student_username != record.student_username) or (
        data.tutor_username is not None and data.tutor_username != record.tutor_username
    ):
        raise ForbiddenError("Les parties d'un paiement ne peuvent pas être modifiées.", code="IMMUTABLE_FIELD")
    check_version(record, data.version)

    if data.amount_paid is not None:
        record.amount_paid = data.amount_paid
    if data.means_of_payment is not None:
        record.means_of_payment = data.means_of_payment.value
    if data.paid_on is not None:
        record.paid_on = data.paid_on

    commit_or_conflict(db, PaymentRecord, payment_id, NOT_FOUND)
    db.refresh(record)
    return record


def delete_payment(db: Session, principal: Account, payment_id: int) -> None:
    record = _load(db, principal, payment_id, Action.DELETE)
    db.delete(record)
    commit_or_conflict(db, PaymentRecord, payment_id, NOT_FOUND)
    logger.info("Paiement supprimé : %s par %s", payment_id, principal.username)
