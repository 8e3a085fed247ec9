"""
Schémas Pydantic pour les comptes (inscription, connexion, consultation).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.models.enums import AccountState, EventType
from app.schemas.common import strip_not_empty


class RegisterRequest(BaseModel):
    """Corps de requête commun aux inscriptions tuteur et élève."""
    username: str
    password: str
    display_name: str
    email: EmailStr

    @field_validator("username")
    @classmethod
    def username_valid(cls, v: str) -> str:
        v = strip_not_empty(v, "Le nom d'utilisateur ne peut pas être vide.")
        if len(v) > 50:
            raise ValueError("Le nom d'utilisateur ne peut pas dépasser 50 caractères.")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if not 6 <= len(v) <= 100:
            raise ValueError("Le mot de passe doit contenir entre 6 et 100 caractères.")
        return v

    @field_validator("display_name")
    @classmethod
    def display_name_not_empty(cls, v: str) -> str:
        return strip_not_empty(v, "Le nom affiché ne peut pas être vide.")


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    username: str
    token: str
    token_type: str = "bearer"


class AccountResponse(BaseModel):
    username: str
    display_name: str
    email: str
    is_tutor: bool
    is_active: bool
    state: AccountState


class AccountHistoryResponse(BaseModel):
    id: int
    account_username: str
    event_type: EventType
    event_timestamp: datetime

    model_config = {"from_attributes": True}


class AccountSettingsResponse(BaseModel):
    """Paramètres visibles d'un compte, jamais de hash ni de jeton."""
    account_username: str
    token_expiration_date: datetime
    profile_picture_file_name: Optional[str]

    model_config = {"from_attributes": True}


class DetailResponse(BaseModel):
    detail: str
