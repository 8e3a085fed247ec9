"""
Utilitaires partagés par les schémas Pydantic.
"""

from datetime import datetime
from typing import Optional


def to_naive_local(v: Optional[datetime]) -> Optional[datetime]:
    """
    Les dates sont stockées sans fuseau (heure locale du serveur).
    Une date reçue avec fuseau est convertie en heure locale puis rendue naïve,
    sinon les comparaisons avec datetime.now() lèvent TypeError.
    """
    if v is not None and v.tzinfo is not None:
        return v.astimezone().replace(tzinfo=None)
    return v


def strip_not_empty(v: Optional[str], message: str) -> Optional[str]:
    if v is None:
        return v
    if not v.strip():
        raise ValueError(message)
    return v.strip()
