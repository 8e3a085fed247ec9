"""
Exceptions métier de l'API.

Chaque classe correspond à une famille de statut HTTP. Le champ `code` est
stable et destiné aux clients (le message `detail` peut évoluer).
Le rendu JSON est fait par le handler enregistré dans app.main.
"""

from typing import Optional


class AppError(Exception):
    """Base de toutes les erreurs métier."""

    status_code = 500
    default_code = "ERROR"

    def __init__(self, detail: str, code: Optional[str] = None):
        self.detail = detail
        self.code = code or self.default_code
        super().__init__(detail)


class UnauthorizedError(AppError):
    """Aucun jeton, jeton invalide, ou identifiants refusés."""
    status_code = 401
    default_code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    """Utilisateur authentifié mais non autorisé sur cette ressource."""
    status_code = 403
    default_code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    """Clé unique déjà prise, ou écriture concurrente périmée."""
    status_code = 409
    default_code = "CONFLICT"


class BadRequestError(AppError):
    """Entrée invalide au regard des règles métier (ex : date passée)."""
    status_code = 400
    default_code = "BAD_REQUEST"


class InternalError(AppError):
    """Invariant violé en base (ex : session rattachée à un cours inexistant)."""
    status_code = 500
    default_code = "DATA_CORRUPTION"
