"""
Dépendances FastAPI partagées : authentification par jeton Bearer.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import UnauthorizedError
from app.models.account import Account
from app.models.enums import AccountState
from app.services.account_service import get_account_state
from app.services.token_service import TokenSigner, get_token_signer

bearer_scheme = HTTPBearer(auto_error=False)


def get_signer() -> TokenSigner:
    return get_token_signer()


def get_token_subject(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_signer),
) -> str:
    """Nom d'utilisateur porté par le jeton, sans accès à la base."""
    if credentials is None:
        raise UnauthorizedError("Authentification requise.", code="MISSING_TOKEN")
    username = signer.decode_subject(credentials.credentials)
    if not username:
        raise UnauthorizedError("Jeton invalide ou expiré.", code="INVALID_TOKEN")
    return username


def get_current_account(
    username: str = Depends(get_token_subject),
    db: Session = Depends(get_db),
) -> Account:
    """
    Compte authentifié. Seul un compte ACTIVE est accepté : un compte désactivé
    doit se reconnecter (ce qui le réactive) avant de pouvoir appeler l'API.
    """
    account = db.get(Account, username)
    if account is None:
        raise UnauthorizedError("Compte introuvable.", code="UNKNOWN_ACCOUNT")

    state = get_account_state(db, account)
    if state is AccountState.PENDING_VERIFICATION:
        raise UnauthorizedError("Compte non activé.", code="ACCOUNT_NOT_ACTIVE")
    if state is AccountState.DEACTIVATED:
        raise UnauthorizedError(
            "Compte désactivé. Reconnectez-vous pour le réactiver.", code="ACCOUNT_DEACTIVATED"
        )
    return account
