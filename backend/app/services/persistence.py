"""
Helpers de persistance partagés par tous les services.

Toute écriture concurrente périmée suit la même règle :
StaleDataError → rollback → la ligne existe-t-elle encore ?
  - non : NotFoundError
  - oui : ConflictError (le client doit recharger)
"""

import logging
from typing import Any, Optional, Type

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

STALE_WRITE_DETAIL = "La ressource a été modifiée entre-temps. Rechargez-la puis réessayez."


def check_version(entity: Any, expected: Optional[int]) -> None:
    """Refuse une mise à jour basée sur une version déjà dépassée."""
    if expected is not None and expected != entity.version:
        raise ConflictError(STALE_WRITE_DETAIL, code="STALE_WRITE")


def commit_or_conflict(db: Session, model: Type, pk: Any, not_found_detail: str) -> None:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.info("Écriture concurrente détectée sur %s %s", model.__name__, pk)
        if db.get(model, pk) is None:
            raise NotFoundError(not_found_detail)
        raise ConflictError(STALE_WRITE_DETAIL, code="STALE_WRITE")
