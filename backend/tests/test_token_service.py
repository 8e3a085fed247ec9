"""
Tests unitaires pour le signataire de jetons d'accès (JWT).
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.config import Settings
from app.services.token_service import TokenSigner


def make_settings(**kwargs) -> Settings:
    values = {"SECRET_KEY": "cle-test", "ENV": "development"}
    values.update(kwargs)
    return Settings(**values)


def test_create_token_sujet_et_expiration_7_jours():
    signer = TokenSigner(make_settings())
    now = datetime.now(timezone.utc).replace(microsecond=0)
    token = signer.create_token("t1", now=now)

    payload = jwt.decode(token, "cle-test", algorithms=["HS256"])
    assert payload["sub"] == "t1"
    assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())


def test_decode_subject_jeton_valide():
    signer = TokenSigner(make_settings())
    assert signer.decode_subject(signer.create_token("s1")) == "s1"


def test_decode_subject_jeton_expire():
    """Un jeton émis il y a 8 jours est refusé."""
    signer = TokenSigner(make_settings())
    old = datetime.now(timezone.utc) - timedelta(days=8)
    assert signer.decode_subject(signer.create_token("s1", now=old)) is None


def test_decode_subject_mauvaise_cle():
    token = TokenSigner(make_settings(SECRET_KEY="autre-cle")).create_token("t1")
    assert TokenSigner(make_settings()).decode_subject(token) is None


def test_decode_subject_jeton_malforme():
    assert TokenSigner(make_settings()).decode_subject("pas-un-jwt") is None


def test_cle_vide_genere_cle_ephemere():
    """Sans SECRET_KEY hors production : clé aléatoire, signalée comme éphémère."""
    signer = TokenSigner(make_settings(SECRET_KEY=""))
    assert signer.ephemeral is True
    assert signer.secret_key
    assert signer.decode_subject(signer.create_token("t1")) == "t1"


def test_cle_ephemere_differente_par_instance():
    """Les jetons ne survivent pas à un redémarrage en mode clé éphémère."""
    first = TokenSigner(make_settings(SECRET_KEY=""))
    second = TokenSigner(make_settings(SECRET_KEY=""))
    assert second.decode_subject(first.create_token("t1")) is None


def test_cle_vide_refusee_en_production():
    with pytest.raises(RuntimeError):
        TokenSigner(make_settings(SECRET_KEY="", ENV="production"))
