"""
Schémas Pydantic pour les paiements.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from app.models.enums import MeansOfPayment
from app.schemas.common import to_naive_local


class PaymentCreate(BaseModel):
    student_username: str
    tutor_username: str
    amount_paid: Decimal
    means_of_payment: MeansOfPayment
    paid_on: datetime

    @field_validator("amount_paid")
    @classmethod
    def amount_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Le montant payé doit être strictement positif.")
        return v

    @field_validator("paid_on")
    @classmethod
    def naive_date(cls, v: datetime) -> datetime:
        return to_naive_local(v)


class PaymentUpdate(BaseModel):
    """Seuls les détails du paiement sont modifiables, jamais les parties."""
    student_username: Optional[str] = None
    tutor_username: Optional[str] = None
    amount_paid: Optional[Decimal] = None
    means_of_payment: Optional[MeansOfPayment] = None
    paid_on: Optional[datetime] = None
    version: Optional[int] = None

    @field_validator("amount_paid")
    @classmethod
    def amount_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Le montant payé doit être strictement positif.")
        return v

    @field_validator("paid_on")
    @classmethod
    def naive_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(v)


class PaymentResponse(BaseModel):
    id: int
    student_username: str
    tutor_username: str
    amount_paid: Decimal
    means_of_payment: MeansOfPayment
    paid_on: datetime
    version: int

    model_config = {"from_attributes": True}
