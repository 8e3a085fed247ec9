"""
Gestion des secrets d'un compte : mot de passe et jeton d'activation.

- Mot de passe : bcrypt, sel stocké à part (password_salt) et réutilisé pour
  recalculer le hash à la connexion ; comparaison en temps constant.
- Jeton d'activation : 32 octets aléatoires envoyés en hexadécimal par email ;
  seul son sha256 est conservé en base.
"""

import hashlib
import secrets
from typing import Tuple

import bcrypt

BCRYPT_ROUNDS = 12
ACTIVATION_TOKEN_BYTES = 32


def _password_bytes(password: str) -> bytes:
    # bcrypt ignore tout ce qui dépasse 72 octets (et les versions récentes lèvent une erreur)
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> Tuple[bytes, bytes]:
    """Retourne (hash, sel) pour un mot de passe en clair."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt), salt


def verify_password(password: str, password_hash: bytes, password_salt: bytes) -> bool:
    """Recalcule le hash avec le sel stocké et compare octet par octet en temps constant."""
    computed = bcrypt.hashpw(_password_bytes(password), password_salt)
    return secrets.compare_digest(computed, password_hash)


def generate_activation_token() -> str:
    """Jeton brut, à n'utiliser que dans l'email de vérification."""
    return secrets.token_hex(ACTIVATION_TOKEN_BYTES)


def hash_activation_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest().upper()


def activation_token_matches(raw_token: str, stored_hash: str) -> bool:
    if not stored_hash:
        return False
    return secrets.compare_digest(hash_activation_token(raw_token), stored_hash)
