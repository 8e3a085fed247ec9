"""
Stockage local des fichiers déposés (solutions de devoirs, pièces jointes,
supports de cours, photos de profil).

Les fichiers sont enregistrés sous UPLOAD_DIR avec un identifiant unique
préfixé au nom d'origine ; la base ne conserve que cet identifiant.
"""

import logging
import uuid
from pathlib import Path
from typing import BinaryIO

from app.config import settings
from app.exceptions import BadRequestError, InternalError

logger = logging.getLogger(__name__)


def _uploads_path() -> Path:
    return Path(settings.UPLOAD_DIR).resolve()


def _max_size() -> int:
    return settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024


def read_upload(stream: BinaryIO) -> bytes:
    """Lit au plus la taille maximale + 1 octet : un fichier trop gros n'est jamais chargé en entier."""
    return stream.read(_max_size() + 1)


def save_file(content: bytes, original_name: str) -> str:
    """Enregistre le contenu et retourne l'identifiant généré."""
    if not content:
        raise BadRequestError("Le fichier est vide.", code="EMPTY_FILE")
    if len(content) > _max_size():
        raise BadRequestError(
            f"Fichier trop volumineux. Taille maximale : {settings.MAX_UPLOAD_SIZE_MB} Mo.",
            code="FILE_TOO_LARGE",
        )

    uploads = _uploads_path()
    uploads.mkdir(parents=True, exist_ok=True)

    # Path(...).name retire tout composant de chemin envoyé par le client
    safe_name = Path(original_name or "fichier").name or "fichier"
    file_id = f"{uuid.uuid4().hex}_{safe_name}"
    (uploads / file_id).write_bytes(content)

    logger.info("Fichier enregistré : %s (%d octets)", file_id, len(content))
    return file_id


def resolve_path(file_id: str) -> Path:
    """Chemin absolu d'un fichier stocké. Refuse toute sortie du dossier d'upload."""
    uploads = _uploads_path()
    path = (uploads / file_id).resolve()
    if path.parent != uploads:
        raise BadRequestError("Identifiant de fichier invalide.", code="INVALID_FILE_ID")
    return path


def original_name(file_id: str) -> str:
    """Nom d'origine du fichier, sans l'identifiant préfixé."""
    return file_id.split("_", 1)[-1]


def open_stored_file(file_id: str) -> Path:
    """Chemin d'un fichier référencé en base ; son absence sur disque est une incohérence serveur."""
    path = resolve_path(file_id)
    if not path.is_file():
        logger.error("Fichier référencé introuvable sur le disque : %s", file_id)
        raise InternalError("Le fichier n'existe plus sur le serveur.", code="FILE_MISSING")
    return path


def delete_file(file_id: str) -> None:
    """Suppression au mieux : une erreur est journalisée, jamais propagée."""
    if not file_id:
        return
    try:
        resolve_path(file_id).unlink(missing_ok=True)
    except (OSError, BadRequestError) as exc:
        logger.warning("Impossible de supprimer le fichier %s : %s", file_id, exc)
