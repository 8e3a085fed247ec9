"""
Schémas Pydantic pour les messages, les notes et les notifications.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.models.enums import NotificationType
from app.schemas.common import to_naive_local


class MessageResponse(BaseModel):
    id: int
    sender_username: str
    recipient_username: str
    topic: str
    body: str
    attachment_file_name: Optional[str]
    sent_on: datetime

    model_config = {"from_attributes": True}


class NoteCreate(BaseModel):
    account_username: str
    date: datetime
    body: str = ""

    @field_validator("date")
    @classmethod
    def naive_date(cls, v: datetime) -> datetime:
        return to_naive_local(v)


class NoteUpdate(BaseModel):
    account_username: Optional[str] = None  # ne peut pas changer de propriétaire
    date: Optional[datetime] = None
    body: Optional[str] = None
    version: Optional[int] = None

    @field_validator("date")
    @classmethod
    def naive_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(v)


class NoteResponse(BaseModel):
    id: int
    account_username: str
    date: datetime
    body: str
    version: int

    model_config = {"from_attributes": True}


class NotificationResponse(BaseModel):
    id: int
    account_username: str
    notification_type: NotificationType
    message: str
    notification_time: datetime

    model_config = {"from_attributes": True}
