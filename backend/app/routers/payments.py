"""
Router pour les paiements.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.payment import PaymentCreate, PaymentResponse, PaymentUpdate
from app.services import payment_service

router = APIRouter(prefix="/api/v1/payments", tags=["Paiements"])


@router.get("", response_model=List[PaymentResponse], summary="Lister les paiements")
def list_payments(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    """Paiements où le compte connecté est le tuteur ou l'élève."""
    return payment_service.list_payments(db, current)


@router.get("/{payment_id}", response_model=PaymentResponse, summary="Détail d'un paiement")
def get_payment(payment_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return payment_service.get_payment(db, current, payment_id)


@router.post("", response_model=PaymentResponse, status_code=201, summary="Enregistrer un paiement")
def create_payment(data: PaymentCreate, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return payment_service.create_payment(db, current, data)


@router.put("/{payment_id}", response_model=PaymentResponse, summary="Modifier un paiement")
def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    return payment_service.update_payment(db, current, payment_id, data)


@router.delete("/{payment_id}", status_code=204, summary="Supprimer un paiement")
def delete_payment(payment_id: int, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    payment_service.delete_payment(db, current, payment_id)
