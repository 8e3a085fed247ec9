"""
Émission et validation des jetons d'accès (JWT signé HMAC).

Le sujet (`sub`) est le nom d'utilisateur ; la durée de validité est fixe
(ACCESS_TOKEN_EXPIRE_MINUTES, 7 jours) et ne dépend pas de l'activité.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import JWTError, jwt

from app.config import Settings, settings

logger = logging.getLogger(__name__)


class TokenSigner:
    """Signe et vérifie les jetons à partir d'une configuration explicite."""

    def __init__(self, config: Settings):
        self.algorithm = config.ALGORITHM
        self.expire_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.ephemeral = not config.SECRET_KEY

        if self.ephemeral:
            if config.ENV == "production":
                raise RuntimeError("SECRET_KEY doit être définie en production.")
            # Clé valable pour la durée du processus : les jetons ne survivent pas à un redémarrage
            self.secret_key = secrets.token_urlsafe(64)
            logger.warning(
                "SECRET_KEY absente : clé de signature éphémère générée "
                "(développement uniquement, jetons invalidés au redémarrage)."
            )
        else:
            self.secret_key = config.SECRET_KEY

    def create_token(self, username: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expire_delta).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_subject(self, token: str) -> Optional[str]:
        """Retourne le nom d'utilisateur du jeton, ou None si invalide ou expiré."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        return payload.get("sub")


@lru_cache
def get_token_signer() -> TokenSigner:
    """Instance unique construite au premier appel (au démarrage via le lifespan)."""
    return TokenSigner(settings)
