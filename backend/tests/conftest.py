"""
Configuration partagée pour tous les tests.

Deux familles de fixtures :
- client / tutor_client / student_client : BDD mockée (MagicMock), services patchés
  dans chaque test, pour tester les URLs, codes HTTP et formats de réponse ;
- db / api : vraie base SQLite en mémoire, pour les règles métier de bout en bout.
"""

import os
import tempfile

# Doit précéder tout import de app : settings est lu à l'import de app.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "cle-de-test-uniquement"
os.environ["CLEANUP_ENABLED"] = "false"
os.environ["ENV"] = "test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="tutorapp-tests-")

from datetime import datetime, timedelta  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db  # noqa: E402
from app.dependencies import get_current_account  # noqa: E402
from app.main import app  # noqa: E402
from app.models.account import Account, AccountCredential, AccountHistory  # noqa: E402
from app.models.enums import EventType  # noqa: E402
from app.services import credentials  # noqa: E402
from app.services.token_service import get_token_signer  # noqa: E402


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Coût bcrypt minimal : les tests n'ont pas besoin d'un hash lent."""
    monkeypatch.setattr(credentials, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def mailer():
    """Aucun email réel n'est envoyé ; les mocks permettent de vérifier les envois."""
    with patch("app.services.account_service.send_verification_email", return_value=True) as verification, \
         patch("app.services.account_service.send_deactivation_warning", return_value=True) as warning:
        yield MagicMock(verification=verification, warning=warning)


# ============================================================
# BDD mockée
# ============================================================

def make_principal(username: str = "t1", is_tutor: bool = True) -> Account:
    return Account(
        username=username,
        display_name=username.upper(),
        email=f"{username}@example.com",
        is_active=True,
        is_tutor=is_tutor,
    )


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def tutor_client(client):
    """Client authentifié comme le tuteur t1 (BDD mockée)."""
    app.dependency_overrides[get_current_account] = lambda: make_principal("t1", True)
    return client


@pytest.fixture
def student_client(client):
    """Client authentifié comme l'élève s1 (BDD mockée)."""
    app.dependency_overrides[get_current_account] = lambda: make_principal("s1", False)
    return client


# ============================================================
# Vraie base SQLite en mémoire
# ============================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api(session_factory):
    """Client HTTP branché sur la base SQLite (une session par requête, comme en production)."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def create_account(
    db,
    username: str,
    is_tutor: bool = False,
    password: str = "secret123",
    active: bool = True,
) -> Account:
    """Crée directement un compte en base (sans passer par l'inscription)."""
    password_hash, password_salt = credentials.hash_password(password)
    account = Account(
        username=username,
        display_name=username.upper(),
        email=f"{username}@example.com",
        is_active=active,
        is_tutor=is_tutor,
    )
    db.add(account)
    db.add(AccountCredential(
        account_username=username,
        password_hash=password_hash,
        password_salt=password_salt,
        activation_token="",
        token_expiration_date=datetime.now() + timedelta(hours=24),
        profile_picture_file_name="",
    ))
    db.commit()
    db.refresh(account)
    return account


def add_history(db, username: str, event_type: EventType, when: datetime) -> AccountHistory:
    event = AccountHistory(account_username=username, event_type=event_type.value, event_timestamp=when)
    db.add(event)
    db.commit()
    return event


def auth_headers(username: str) -> dict:
    return {"Authorization": f"Bearer {get_token_signer().create_token(username)}"}
