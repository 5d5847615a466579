# /lms/services/material_service.py

"""
Business logic for course materials: the teacher's upload (which triggers
the notification fan-out) and the read paths for students and teachers.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import UploadFile

from lms.core.errors import LMSError, NotFoundError, ValidationFailedError, validate_or_fail
from lms.db.models.material_models import Material
from lms.db.models.user_model import User
from lms.models.material_model import MaterialCreate
from . import notification_service, storage_service
from .access_control import Action, authorize_role, decide
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


@dataclass
class UploadOutcome:
    material: Material
    subject_name: str
    notified: int = 0
    recipients: List[Tuple[str, str]] = field(default_factory=list)


def upload_material(
    db: DatabaseService,
    actor: User,
    file: Optional[UploadFile],
    title: str,
    material_type: str,
    subject_id: str,
    description: Optional[str] = None,
) -> UploadOutcome:
    """
    Stores the file, records the material and fans it out to the class.

    The material and its outbox entry commit together. The fan-out runs as a
    second transaction; if it fails the material stays, the entry stays
    pending for a later redrive, and `DependencyFailedError` is raised so the
    caller reports the upload as failed. If the material itself cannot be
    written, the stored file is removed again.
    """
    authorize_role(actor, Action.UPLOAD_MATERIAL).enforce()
    material_in = validate_or_fail(
        MaterialCreate, title=title, description=description, type=material_type, subject_id=subject_id
    )
    if file is None or not file.filename:
        raise ValidationFailedError("Please upload a file")

    subject = db.get_subject_by_id(material_in.subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    decide(actor, Action.UPLOAD_MATERIAL, subject).enforce()

    file_url = storage_service.store(file, folder="materials")

    try:
        with db.transaction():
            material = db.add_material({
                "id": f"mat_{uuid.uuid4().hex[:12]}",
                "title": material_in.title,
                "description": material_in.description,
                "type": material_in.type.value,
                "file_url": file_url,
                "subject_id": subject.id,
                "created_by": actor.id,
            })
            entry_id = notification_service.enqueue_material_fanout(db, material.id)
    except LMSError:
        storage_service.discard(file_url)
        raise
    logger.info(f"Teacher {actor.id} uploaded material {material.id} to subject {subject.id}")

    fanout = notification_service.dispatch_outbox_entry(db, entry_id)
    return UploadOutcome(
        material=material,
        subject_name=subject.name,
        notified=fanout.notified,
        recipients=fanout.recipients,
    )


def get_material(db: DatabaseService, actor: User, material_id: str) -> Material:
    authorize_role(actor, Action.READ_MATERIAL).enforce()
    material = db.get_material_by_id(material_id)
    if not material:
        raise NotFoundError("Material not found")
    decide(actor, Action.READ_MATERIAL, material).enforce()
    return material


def get_subject_materials(db: DatabaseService, actor: User, subject_id: str) -> Dict:
    """Materials of a subject, newest first."""
    authorize_role(actor, Action.LIST_SUBJECT_MATERIALS).enforce()
    subject = db.get_subject_by_id(subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    decide(actor, Action.LIST_SUBJECT_MATERIALS, subject).enforce()

    materials = db.get_materials_by_subject_id(subject.id)
    return {"subject_name": subject.name, "count": len(materials), "materials": materials}
