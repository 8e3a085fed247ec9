"""
Schémas Pydantic pour les séances et les devoirs.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.models.enums import ConfirmationStatus
from app.schemas.common import strip_not_empty, to_naive_local


class SessionCreate(BaseModel):
    student_username: str
    course_id: int
    session_date_time: datetime
    is_paid_for: bool = False

    @field_validator("session_date_time")
    @classmethod
    def naive_date(cls, v: datetime) -> datetime:
        return to_naive_local(v)


class SessionUpdate(BaseModel):
    """
    Mise à jour d'une séance par son tuteur.
    course_id, student_username et confirmation_status peuvent être renvoyés
    tels quels par le client mais ne peuvent pas être modifiés ici.
    """
    student_username: Optional[str] = None
    course_id: Optional[int] = None
    session_date_time: Optional[datetime] = None
    is_paid_for: Optional[bool] = None
    confirmation_status: Optional[ConfirmationStatus] = None
    version: Optional[int] = None

    @field_validator("session_date_time")
    @classmethod
    def naive_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(v)


class HomeworkCreate(BaseModel):
    session_id: int
    name: str
    objective: str = ""

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        return strip_not_empty(v, "Le nom du devoir ne peut pas être vide.")


class HomeworkUpdate(BaseModel):
    name: Optional[str] = None
    objective: Optional[str] = None
    solution_feedback: Optional[str] = None
    version: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return strip_not_empty(v, "Le nom du devoir ne peut pas être vide.")


class HomeworkResponse(BaseModel):
    id: int
    session_id: int
    name: str
    objective: str
    has_solution_file: bool
    solution_feedback: Optional[str]
    version: int

    @classmethod
    def from_model(cls, homework) -> "HomeworkResponse":
        """Le nom du fichier de solution n'est jamais exposé, seulement sa présence."""
        return cls(
            id=homework.id,
            session_id=homework.session_id,
            name=homework.name,
            objective=homework.objective or "",
            has_solution_file=bool(homework.solution_file_name),
            solution_feedback=homework.solution_feedback,
            version=homework.version,
        )


class SessionResponse(BaseModel):
    id: int
    student_username: str
    course_id: int
    session_date_time: datetime
    is_paid_for: bool
    confirmation_status: ConfirmationStatus
    version: int

    model_config = {"from_attributes": True}


class SessionDetailResponse(SessionResponse):
    """Détail d'une séance avec ses devoirs."""
    homework_assignments: List[HomeworkResponse] = []
