"""
Modèles SQLAlchemy pour les comptes, leurs identifiants et leur historique.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, LargeBinary, String, func

from app.database import Base


class Account(Base):
    """Compte tuteur ou élève. Le rôle (is_tutor) est fixé à la création."""
    __tablename__ = "accounts"

    username = Column(String(50), primary_key=True)
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)  # vérification email uniquement
    is_tutor = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())


class AccountCredential(Base):
    """Secrets d'un compte (1:1). Le jeton d'activation brut n'est jamais stocké."""
    __tablename__ = "account_credentials"

    account_username = Column(String(50), ForeignKey("accounts.username"), primary_key=True)
    password_hash = Column(LargeBinary, nullable=False)
    password_salt = Column(LargeBinary, nullable=False)
    activation_token = Column(String(64), nullable=False, default="")  # sha256 hex, "" une fois consommé
    token_expiration_date = Column(DateTime, nullable=False)
    profile_picture_file_name = Column(String(255), nullable=False, default="")


class AccountHistory(Base):
    """Journal append-only des activations/désactivations."""
    __tablename__ = "account_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    event_type = Column(String(20), nullable=False)  # ACTIVATION, DEACTIVATION
    event_timestamp = Column(DateTime, nullable=False)
