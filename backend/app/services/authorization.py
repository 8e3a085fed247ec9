"""
Règles d'autorisation par propriété.

Fonctions pures : elles ne lisent pas la base. Le service appelant charge
l'entité (et ses parents) puis interroge la règle ; l'absence d'une entité
est toujours signalée avant (NotFoundError), le refus ensuite (ForbiddenError).

Les endpoints de liste appliquent une politique nommée (LIST_POLICIES) :
FILTER omet silencieusement les lignes non autorisées, FORBID refuse la requête.
"""

from enum import Enum
from typing import Callable, Iterable, List, TypeVar

from app.exceptions import ForbiddenError
from app.models.account import Account
from app.models.communication import Message, Note, Notification
from app.models.course import Course
from app.models.payment import PaymentRecord
from app.models.tutoring_session import TutoringSession

T = TypeVar("T")

NOT_A_TUTOR = "Cette opération est réservée aux tuteurs."
NOT_A_STUDENT = "Cette opération est réservée aux élèves."


class Action(str, Enum):
    READ = "READ"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ListPolicy(str, Enum):
    FILTER = "FILTER"
    FORBID = "FORBID"


LIST_POLICIES = {
    "accounts": ListPolicy.FILTER,
    "courses": ListPolicy.FILTER,
    "sessions": ListPolicy.FILTER,
    "homework": ListPolicy.FILTER,
    "messages": ListPolicy.FILTER,
    "notes": ListPolicy.FILTER,
    "notifications": ListPolicy.FILTER,
    "payments": ListPolicy.FILTER,
    "teaching_materials": ListPolicy.FILTER,
    "course_enrollments": ListPolicy.FORBID,
    "student_enrollments": ListPolicy.FORBID,
}


def require(allowed: bool, detail: str, code: str = "FORBIDDEN") -> None:
    if not allowed:
        raise ForbiddenError(detail, code=code)


def apply_list_policy(endpoint: str, rows: Iterable[T], predicate: Callable[[T], bool]) -> List[T]:
    """Applique la politique de l'endpoint à des lignes candidates."""
    rows = list(rows)
    allowed = [row for row in rows if predicate(row)]
    if LIST_POLICIES[endpoint] is ListPolicy.FORBID and len(allowed) != len(rows):
        raise ForbiddenError("Accès refusé à cette liste.", code="LIST_FORBIDDEN")
    return allowed


# --- Comptes ---

def can_view_account(principal: Account, target_username: str) -> bool:
    return principal.is_tutor or principal.username == target_username


def can_deactivate(actor: Account, target: Account) -> bool:
    """Un tuteur peut se désactiver lui-même, ou désactiver un compte non tuteur."""
    if not actor.is_tutor:
        return False
    if actor.username == target.username:
        return True
    return not target.is_tutor


def can_register_student(principal: Account) -> bool:
    return principal.is_tutor


# --- Cours ---

def can_access_course(principal: Account, action: Action, course: Course, is_enrolled: bool = False) -> bool:
    """
    Tuteur : uniquement ses propres cours, pour toute action.
    Élève : lecture seule, et seulement s'il est inscrit au cours.
    """
    if principal.is_tutor:
        return course.tutor_username == principal.username
    return action is Action.READ and is_enrolled


def can_create_course(principal: Account, tutor_username: str) -> bool:
    """Pas de création au nom d'un autre tuteur."""
    return principal.is_tutor and tutor_username == principal.username


# --- Séances ---

def can_access_session(principal: Account, action: Action, session: TutoringSession, course: Course) -> bool:
    if principal.is_tutor:
        return course.tutor_username == principal.username
    return action is Action.READ and session.student_username == principal.username


def can_respond_to_session(principal: Account, session: TutoringSession) -> bool:
    """Accepter/refuser une séance : seul l'élève concerné."""
    return not principal.is_tutor and session.student_username == principal.username


# --- Devoirs ---

def can_access_homework(principal: Account, action: Action, session: TutoringSession, course: Course) -> bool:
    """Visibilité héritée de la séance (élève) ou du cours (tuteur)."""
    return can_access_session(principal, action, session, course)


def can_upload_solution(principal: Account, session: TutoringSession) -> bool:
    return not principal.is_tutor and session.student_username == principal.username


# --- Messages ---

def can_access_message(principal: Account, message: Message) -> bool:
    return principal.username in (message.sender_username, message.recipient_username)


# --- Notes ---

def can_access_note(principal: Account, note: Note) -> bool:
    """Strictement réservé au propriétaire, y compris pour un tuteur."""
    return note.account_username == principal.username


# --- Notifications ---

def can_access_notification(principal: Account, notification: Notification) -> bool:
    return notification.account_username == principal.username


# --- Paiements ---

def can_access_payment(principal: Account, action: Action, record: PaymentRecord) -> bool:
    """Lecture : l'une ou l'autre partie. Écriture : le tuteur nommé uniquement."""
    if action is Action.READ:
        return principal.username in (record.tutor_username, record.student_username)
    return principal.is_tutor and record.tutor_username == principal.username


# --- Supports de cours ---

def can_access_material(principal: Account, action: Action, course: Course, is_enrolled: bool = False) -> bool:
    return can_access_course(principal, action, course, is_enrolled)


# --- Inscriptions ---

def can_access_enrollment(
    principal: Account,
    action: Action,
    student_username: str,
    course: Course,
) -> bool:
    """
    Lecture et désinscription : l'élève nommé ou le tuteur du cours.
    Création et modification : le tuteur du cours uniquement.
    """
    is_course_tutor = principal.is_tutor and course.tutor_username == principal.username
    if action in (Action.CREATE, Action.UPDATE):
        return is_course_tutor
    return is_course_tutor or principal.username == student_username
