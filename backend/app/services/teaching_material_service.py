"""
Service métier pour les supports de cours (fichiers rattachés à un cours).

Accès : le tuteur du cours, ou un élève inscrit au cours. La même règle sert
au filtrage des listes et à la lecture d'un support isolé.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, ForbiddenError, InternalError, NotFoundError
from app.models.account import Account
from app.models.course import Course, StudentCourse, TeachingMaterial
from app.schemas.course import TeachingMaterialUpdate
from app.services import authorization as authz
from app.services import file_service
from app.services.authorization import Action
from app.services.course_service import is_enrolled
from app.services.persistence import check_version, commit_or_conflict

logger = logging.getLogger(__name__)

NOT_FOUND = "Support de cours introuvable."


def _load(db: Session, principal: Account, material_id: int, action: Action) -> Tuple[TeachingMaterial, Course]:
    material = db.get(TeachingMaterial, material_id)
    if material is None:
        raise NotFoundError(NOT_FOUND)
    course = db.get(Course, material.course_id)
    if course is None:
        raise InternalError("Le support référence un cours inexistant (base corrompue ?).")
    enrolled = not principal.is_tutor and is_enrolled(db, principal.username, course.id)
    authz.require(
        authz.can_access_material(principal, action, course, enrolled),
        "Vous n'avez pas accès à ce support de cours.",
        code="NOT_OWNER",
    )
    return material, course


def list_materials(db: Session, principal: Account, course_id: Optional[int] = None) -> List[TeachingMaterial]:
    """Supports visibles par le compte, éventuellement restreints à un cours."""
    query = select(TeachingMaterial, Course).join(Course, Course.id == TeachingMaterial.course_id)
    if principal.is_tutor:
        query = query.where(Course.tutor_username == principal.username)
    else:
        query = query.join(StudentCourse, StudentCourse.course_id == Course.id).where(
            StudentCourse.student_username == principal.username
        )
    if course_id is not None:
        query = query.where(TeachingMaterial.course_id == course_id)

    rows = db.execute(query.order_by(TeachingMaterial.id)).all()
    allowed = authz.apply_list_policy(
        "teaching_materials",
        rows,
        lambda r: authz.can_access_material(principal, Action.READ, r[1], not principal.is_tutor),
    )
    return [r[0] for r in allowed]


def get_material(db: Session, principal: Account, material_id: int) -> TeachingMaterial:
    material, _ = _load(db, principal, material_id, Action.READ)
    return material


def create_material(
    db: Session, principal: Account, course_id: int, name: str, content: bytes, original_name: str
) -> TeachingMaterial:
    if not principal.is_tutor:
        raise ForbiddenError(authz.NOT_A_TUTOR, code="NOT_A_TUTOR")
    if not name or not name.strip():
        raise BadRequestError("Le nom du support ne peut pas être vide.", code="EMPTY_NAME")

    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Cours introuvable.")
    authz.require(
        authz.can_access_material(principal, Action.CREATE, course),
        "Impossible d'ajouter un support au cours d'un autre tuteur.",
        code="NOT_OWNER",
    )

    file_id = file_service.save_file(content, original_name)
    material = TeachingMaterial(course_id=course_id, name=name.strip(), file_name=file_id)
    db.add(material)
    try:
        db.commit()
    except Exception:
        db.rollback()
        file_service.delete_file(file_id)
        raise
    db.refresh(material)

    logger.info("Support %s ajouté au cours %s", material.id, course_id)
    return material


def update_material(
    db: Session, principal: Account, material_id: int, data: TeachingMaterialUpdate
) -> TeachingMaterial:
    material, _ = _load(db, principal, material_id, Action.UPDATE)
    check_version(material, data.version)
    if data.name is not None:
        material.name = data.name

    commit_or_conflict(db, TeachingMaterial, material_id, NOT_FOUND)
    db.refresh(material)
    return material


def delete_material(db: Session, principal: Account, material_id: int) -> None:
    """Le fichier est supprimé au mieux après la suppression en base."""
    material, _ = _load(db, principal, material_id, Action.DELETE)
    file_id = material.file_name

    db.delete(material)
    commit_or_conflict(db, TeachingMaterial, material_id, NOT_FOUND)
    file_service.delete_file(file_id)
    logger.info("Support supprimé : %s", material_id)


def get_material_file(db: Session, principal: Account, material_id: int) -> Tuple[Path, str]:
    material, _ = _load(db, principal, material_id, Action.READ)
    if not material.file_name:
        raise NotFoundError("Ce support n'a pas de fichier.", code="NO_FILE")
    path = file_service.open_stored_file(material.file_name)
    return path, file_service.original_name(material.file_name)
