"""
Valeurs énumérées stockées en base sous forme de chaînes.
"""

from enum import Enum


class EventType(str, Enum):
    """Type d'événement de l'historique d'un compte."""
    ACTIVATION = "ACTIVATION"
    DEACTIVATION = "DEACTIVATION"


class AccountState(str, Enum):
    """État dérivé d'un compte (jamais stocké)."""
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    DEACTIVATED = "DEACTIVATED"


class ConfirmationStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    YES = "YES"
    NO = "NO"


class MeansOfPayment(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    BLIK = "BLIK"


class NotificationType(str, Enum):
    SESSION_ACCEPTED = "SESSION_ACCEPTED"
    SESSION_REJECTED = "SESSION_REJECTED"
    HOMEWORK_SOLUTION_UPLOADED = "HOMEWORK_SOLUTION_UPLOADED"
    MESSAGE_RECEIVED = "MESSAGE_RECEIVED"
    HOMEWORK_ASSIGNED = "HOMEWORK_ASSIGNED"
    SESSION_CREATED = "SESSION_CREATED"
