"""
Service métier du cycle de vie des comptes.

États dérivés (jamais stockés) :
  PENDING_VERIFICATION  is_active = False (email pas encore vérifié)
  DEACTIVATED           dernier événement d'historique = DEACTIVATION
  ACTIVE                sinon

Transitions :
  PENDING_VERIFICATION → ACTIVE       activate()     (jeton valide et non expiré)
  ACTIVE → DEACTIVATED                deactivate()   (par un tuteur autorisé)
  DEACTIVATED → ACTIVE                authenticate() (une connexion réussie réactive)
  DEACTIVATED depuis 14 jours         suppression par cleanup_service

is_active ne sert qu'à la vérification d'email ; l'historique est la seule
source de vérité pour la désactivation.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BadRequestError, ConflictError, InternalError, NotFoundError, UnauthorizedError
from app.models.account import Account, AccountCredential, AccountHistory
from app.models.enums import AccountState, EventType
from app.schemas.account import AccountResponse, RegisterRequest
from app.services import authorization as authz
from app.services import file_service
from app.services.credentials import (
    activation_token_matches,
    generate_activation_token,
    hash_activation_token,
    hash_password,
    verify_password,
)
from app.services.email_service import send_deactivation_warning, send_verification_email
from app.services.token_service import TokenSigner

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Nom d'utilisateur ou mot de passe invalide."
ACCOUNT_NOT_FOUND = "Compte introuvable."
MISSING_CREDENTIALS = "Aucun identifiant enregistré pour ce compte (base corrompue ?)."


# ============================================================
# Inscription et vérification d'email
# ============================================================

def _register(db: Session, data: RegisterRequest, is_tutor: bool) -> Account:
    """
    Crée le compte et ses identifiants dans une seule transaction, puis envoie
    l'email de vérification contenant le jeton brut.

    Les vérifications préalables ne servent qu'à renvoyer un message clair :
    l'unicité est garantie par la clé primaire et l'index unique sur l'email.
    """
    if db.get(Account, data.username) is not None:
        raise ConflictError("Ce nom d'utilisateur est déjà pris.", code="USERNAME_TAKEN")

    email_taken = db.execute(
        select(Account.username).where(Account.email == data.email)
    ).scalar()
    if email_taken:
        raise ConflictError("Un compte existe déjà avec cette adresse email.", code="EMAIL_TAKEN")

    raw_token = generate_activation_token()
    password_hash, password_salt = hash_password(data.password)

    account = Account(
        username=data.username,
        display_name=data.display_name,
        email=data.email,
        is_active=False,
        is_tutor=is_tutor,
    )
    credential = AccountCredential(
        account_username=data.username,
        password_hash=password_hash,
        password_salt=password_salt,
        activation_token=hash_activation_token(raw_token),
        token_expiration_date=datetime.now() + timedelta(hours=settings.ACTIVATION_TOKEN_EXPIRE_HOURS),
        profile_picture_file_name="",
    )
    db.add(account)
    db.add(credential)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            "Ce nom d'utilisateur ou cette adresse email est déjà utilisé.", code="ACCOUNT_TAKEN"
        )
    db.refresh(account)

    logger.info("Compte créé : %s (tuteur=%s)", account.username, is_tutor)

    # Un échec d'envoi est journalisé par send_email et n'annule pas l'inscription
    send_verification_email(account.email, account.username, raw_token)
    return account


def register_tutor(db: Session, data: RegisterRequest) -> Account:
    return _register(db, data, is_tutor=True)


def register_student(db: Session, principal: Account, data: RegisterRequest) -> Account:
    """Les élèves sont inscrits par un tuteur."""
    authz.require(authz.can_register_student(principal), authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    return _register(db, data, is_tutor=False)


def activate(db: Session, username: str, raw_token: str) -> bool:
    """
    Vérifie l'email d'un compte.
    Retourne True si le compte vient d'être activé, False s'il l'était déjà.
    """
    account = db.get(Account, username)
    if account is None:
        raise NotFoundError(ACCOUNT_NOT_FOUND)

    if account.is_active:
        return False

    credential = db.get(AccountCredential, username)
    if credential is None:
        raise InternalError(MISSING_CREDENTIALS)

    if datetime.now() > credential.token_expiration_date:
        raise BadRequestError("Le lien de vérification a expiré.", code="TOKEN_EXPIRED")

    if not activation_token_matches(raw_token, credential.activation_token):
        raise BadRequestError("Jeton de vérification invalide.", code="TOKEN_INVALID")

    account.is_active = True
    credential.activation_token = ""
    db.commit()

    logger.info("Email vérifié, compte activé : %s", username)
    return True


# ============================================================
# État dérivé et connexion
# ============================================================

def get_latest_event(db: Session, username: str) -> Optional[AccountHistory]:
    return db.execute(
        select(AccountHistory)
        .where(AccountHistory.account_username == username)
        .order_by(AccountHistory.event_timestamp.desc(), AccountHistory.id.desc())
        .limit(1)
    ).scalar()


def get_account_state(db: Session, account: Account) -> AccountState:
    if not account.is_active:
        return AccountState.PENDING_VERIFICATION
    latest = get_latest_event(db, account.username)
    if latest is not None and latest.event_type == EventType.DEACTIVATION.value:
        return AccountState.DEACTIVATED
    return AccountState.ACTIVE


def _append_event(db: Session, username: str, event_type: EventType) -> AccountHistory:
    event = AccountHistory(
        account_username=username,
        event_type=event_type.value,
        event_timestamp=datetime.now(),
    )
    db.add(event)
    return event


def authenticate(db: Session, username: str, password: str, signer: TokenSigner) -> str:
    """
    Vérifie les identifiants et retourne un jeton d'accès.
    Une connexion réussie sur un compte désactivé le réactive (événement ACTIVATION).
    """
    account = db.get(Account, username)
    if account is None:
        raise UnauthorizedError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

    if not account.is_active:
        raise UnauthorizedError(
            "Compte non activé. Veuillez vérifier votre adresse email.", code="ACCOUNT_NOT_ACTIVE"
        )

    credential = db.get(AccountCredential, username)
    if credential is None:
        raise InternalError(MISSING_CREDENTIALS)

    if not verify_password(password, credential.password_hash, credential.password_salt):
        raise UnauthorizedError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

    latest = get_latest_event(db, username)
    if latest is not None and latest.event_type == EventType.DEACTIVATION.value:
        _append_event(db, username, EventType.ACTIVATION)
        db.commit()
        logger.info("Compte réactivé par connexion : %s", username)

    return signer.create_token(username)


# ============================================================
# Désactivation
# ============================================================

def deactivate(db: Session, actor: Account, target_username: str) -> None:
    """
    Un tuteur peut désactiver son propre compte ou celui d'un élève.
    L'élève désactivé reçoit un avertissement de suppression sous 14 jours.
    """
    authz.require(actor.is_tutor, "Seuls les tuteurs peuvent désactiver des comptes.", code="NOT_A_TUTOR")

    if target_username == actor.username:
        target = actor
    else:
        target = db.get(Account, target_username)
        if target is None:
            raise NotFoundError(ACCOUNT_NOT_FOUND)

    authz.require(
        authz.can_deactivate(actor, target),
        "Un tuteur ne peut pas désactiver un autre tuteur.",
        code="CANNOT_DEACTIVATE_TUTOR",
    )

    _append_event(db, target.username, EventType.DEACTIVATION)
    db.commit()
    logger.info("Compte %s désactivé par %s", target.username, actor.username)

    if not target.is_tutor:
        send_deactivation_warning(target.email)


# ============================================================
# Consultation
# ============================================================

def to_response(db: Session, account: Account) -> AccountResponse:
    return AccountResponse(
        username=account.username,
        display_name=account.display_name,
        email=account.email,
        is_tutor=account.is_tutor,
        is_active=account.is_active,
        state=get_account_state(db, account),
    )


def list_accounts(db: Session, principal: Account) -> List[AccountResponse]:
    """Un tuteur voit tous les comptes, un élève uniquement le sien."""
    query = select(Account).order_by(Account.username)
    if not principal.is_tutor:
        query = query.where(Account.username == principal.username)
    rows = db.execute(query).scalars().all()
    visible = authz.apply_list_policy("accounts", rows, lambda a: authz.can_view_account(principal, a.username))
    return [to_response(db, a) for a in visible]


def get_account(db: Session, principal: Account, username: str) -> AccountResponse:
    account = db.get(Account, username)
    if account is None:
        raise NotFoundError(ACCOUNT_NOT_FOUND)
    authz.require(authz.can_view_account(principal, username), "Accès refusé à ce compte.")
    return to_response(db, account)


def list_own_history(db: Session, principal: Account) -> List[AccountHistory]:
    return db.execute(
        select(AccountHistory)
        .where(AccountHistory.account_username == principal.username)
        .order_by(AccountHistory.event_timestamp, AccountHistory.id)
    ).scalars().all()


def get_settings(db: Session, principal: Account, username: str) -> AccountCredential:
    """Paramètres d'un compte : le sien, ou n'importe lequel pour un tuteur."""
    if db.get(Account, username) is None:
        raise NotFoundError(ACCOUNT_NOT_FOUND)
    authz.require(
        authz.can_view_account(principal, username),
        "Impossible de consulter les paramètres d'un autre compte.",
    )
    credential = db.get(AccountCredential, username)
    if credential is None:
        raise InternalError(MISSING_CREDENTIALS)
    return credential


def update_profile_picture(db: Session, principal: Account, content: bytes, original_name: str) -> AccountCredential:
    credential = db.get(AccountCredential, principal.username)
    if credential is None:
        raise InternalError(MISSING_CREDENTIALS)

    previous = credential.profile_picture_file_name
    credential.profile_picture_file_name = file_service.save_file(content, original_name)
    db.commit()
    db.refresh(credential)

    file_service.delete_file(previous)
    return credential
