"""
Router pour les comptes : inscription, vérification d'email, connexion,
désactivation et consultation.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_account, get_signer
from app.models.account import Account
from app.schemas.account import (
    AccountHistoryResponse,
    AccountResponse,
    AccountSettingsResponse,
    DetailResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from app.services import account_service, file_service
from app.services.token_service import TokenSigner

router = APIRouter(prefix="/api/v1/accounts", tags=["Comptes"])


@router.post("/register-tutor", response_model=AccountResponse, status_code=201, summary="Inscription d'un tuteur")
def register_tutor(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Inscription libre d'un tuteur. Le compte reste inactif jusqu'à la
    vérification de l'adresse email (lien envoyé par email, valable 24h).
    """
    account = account_service.register_tutor(db, data)
    return account_service.to_response(db, account)


@router.post("/register-student", response_model=AccountResponse, status_code=201, summary="Inscription d'un élève")
def register_student(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    """Un tuteur inscrit un élève ; l'élève reçoit l'email de vérification."""
    account = account_service.register_student(db, current, data)
    return account_service.to_response(db, account)


@router.get("/verify-email", response_model=DetailResponse, summary="Vérifier l'adresse email")
def verify_email(username: str, token: str, db: Session = Depends(get_db)):
    activated = account_service.activate(db, username, token)
    if activated:
        return DetailResponse(detail="Adresse email vérifiée, compte activé.")
    return DetailResponse(detail="Compte déjà activé.")


@router.post("/login", response_model=LoginResponse, summary="Connexion")
def login(data: LoginRequest, db: Session = Depends(get_db), signer: TokenSigner = Depends(get_signer)):
    """Retourne un jeton Bearer valable 7 jours. Une connexion réactive un compte désactivé."""
    token = account_service.authenticate(db, data.username, data.password, signer)
    return LoginResponse(username=data.username, token=token)


@router.post("/deactivate/{username}", response_model=DetailResponse, summary="Désactiver un compte")
def deactivate(
    username: str,
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    """
    Un tuteur désactive son propre compte ou celui d'un élève.
    Sans reconnexion, le compte est supprimé définitivement après 14 jours.
    """
    account_service.deactivate(db, current, username)
    return DetailResponse(detail=f"Compte {username} désactivé.")


@router.get("", response_model=List[AccountResponse], summary="Lister les comptes")
def list_accounts(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return account_service.list_accounts(db, current)


@router.get("/me/history", response_model=List[AccountHistoryResponse], summary="Historique du compte courant")
def my_history(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return account_service.list_own_history(db, current)


@router.get("/me/settings", response_model=AccountSettingsResponse, summary="Paramètres du compte courant")
def my_settings(db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return account_service.get_settings(db, current, current.username)


@router.put("/me/profile-picture", response_model=AccountSettingsResponse, summary="Changer la photo de profil")
def update_profile_picture(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current: Account = Depends(get_current_account),
):
    content = file_service.read_upload(file.file)
    return account_service.update_profile_picture(db, current, content, file.filename or "")


@router.get("/{username}", response_model=AccountResponse, summary="Détail d'un compte")
def get_account(username: str, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return account_service.get_account(db, current, username)


@router.get("/{username}/settings", response_model=AccountSettingsResponse, summary="Paramètres d'un compte")
def get_settings(username: str, db: Session = Depends(get_db), current: Account = Depends(get_current_account)):
    return account_service.get_settings(db, current, username)
