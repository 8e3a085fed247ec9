"""
Schémas Pydantic pour les cours, les inscriptions et les supports de cours.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import strip_not_empty, to_naive_local


class CourseCreate(BaseModel):
    tutor_username: str
    name: str
    price_per_session: Decimal = Decimal("0")
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return strip_not_empty(v, "Le nom du cours ne peut pas être vide.")

    @field_validator("price_per_session")
    @classmethod
    def price_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Le prix par séance ne peut pas être négatif.")
        return v


class CourseUpdate(BaseModel):
    """
    Mise à jour partielle. tutor_username est accepté pour compatibilité
    avec le client, mais ne peut pas différer du tuteur actuel.
    """
    tutor_username: Optional[str] = None
    name: Optional[str] = None
    price_per_session: Optional[Decimal] = None
    description: Optional[str] = None
    version: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return strip_not_empty(v, "Le nom du cours ne peut pas être vide.")

    @field_validator("price_per_session")
    @classmethod
    def price_not_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Le prix par séance ne peut pas être négatif.")
        return v


class CourseResponse(BaseModel):
    id: int
    tutor_username: str
    name: str
    price_per_session: Decimal
    description: Optional[str]
    version: int

    model_config = {"from_attributes": True}


# --- Inscriptions élève ↔ cours ---

class EnrollmentCreate(BaseModel):
    student_username: str
    course_id: int
    frequency: str
    end_date: datetime

    @field_validator("frequency")
    @classmethod
    def frequency_not_empty(cls, v: str) -> str:
        return strip_not_empty(v, "La fréquence ne peut pas être vide.")

    @field_validator("end_date")
    @classmethod
    def naive_end_date(cls, v: datetime) -> datetime:
        return to_naive_local(v)


class EnrollmentUpdate(BaseModel):
    """
    student_username et course_id sont facultatifs ; s'ils sont fournis ils
    doivent correspondre à l'inscription ciblée (pas de réaffectation).
    """
    student_username: Optional[str] = None
    course_id: Optional[int] = None
    frequency: Optional[str] = None
    end_date: Optional[datetime] = None
    version: Optional[int] = None

    @field_validator("frequency")
    @classmethod
    def frequency_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return strip_not_empty(v, "La fréquence ne peut pas être vide.")

    @field_validator("end_date")
    @classmethod
    def naive_end_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(v)


class EnrollmentResponse(BaseModel):
    student_username: str
    course_id: int
    frequency: str
    end_date: datetime
    version: int

    model_config = {"from_attributes": True}


# --- Supports de cours ---

class TeachingMaterialUpdate(BaseModel):
    name: Optional[str] = None
    version: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return strip_not_empty(v, "Le nom du support ne peut pas être vide.")


class TeachingMaterialResponse(BaseModel):
    id: int
    course_id: int
    name: str
    file_name: Optional[str]
    version: int

    model_config = {"from_attributes": True}
