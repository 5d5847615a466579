# /lms/services/organization_service.py

"""
This service module holds the business logic for classes and subjects: what
admins create and wire together, and the read-only views teachers and
students get of that structure.
"""

import logging
import uuid
from typing import Dict, List, Optional

from lms.core.errors import ConflictError, NotFoundError
from lms.db.models.class_subject_models import Class, Subject
from lms.db.models.user_model import User
from lms.models import class_model
from .access_control import Action, authorize_role, decide
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


# --- Admin operations ---

def create_class(db: DatabaseService, actor: User, class_in: class_model.ClassCreate) -> Class:
    decide(actor, Action.CREATE_CLASS).enforce()
    with db.transaction():
        if db.get_class_by_name(class_in.name):
            raise ConflictError("Class already exists with this name")
        new_class = db.add_class({"id": f"cls_{uuid.uuid4().hex[:12]}", **class_in.model_dump()})
    logger.info(f"Created class {new_class.id} ({new_class.name})")
    return new_class


def _resolve_class_and_teacher(db: DatabaseService, class_id: str, teacher_id: str):
    class_obj = db.get_class_by_id(class_id)
    if not class_obj:
        raise NotFoundError("Class not found")
    teacher = db.get_teacher_by_id(teacher_id)
    if not teacher:
        raise NotFoundError("Teacher not found")
    return class_obj, teacher


def assign_teacher_to_class(db: DatabaseService, actor: User, class_id: str, teacher_id: str) -> Class:
    """Attaches a teacher to a class. Attaching the same teacher twice is a conflict."""
    decide(actor, Action.ASSIGN_TEACHER).enforce()
    with db.transaction():
        class_obj, teacher = _resolve_class_and_teacher(db, class_id, teacher_id)
        if class_obj.has_teacher(teacher.id):
            raise ConflictError("Teacher is already assigned to this class")
        db.add_teacher_to_class(class_obj, teacher)
    logger.info(f"Assigned teacher {teacher_id} to class {class_id}")
    return class_obj


def create_subject(db: DatabaseService, actor: User, subject_in: class_model.SubjectCreate) -> Subject:
    """
    Creates a subject owned by one teacher, attaching that teacher to the
    class first if needed.

    The attachment and the subject insert share one transaction: when the
    (name, class) pair is already taken the attachment is rolled back too.
    """
    decide(actor, Action.CREATE_SUBJECT).enforce()
    with db.transaction():
        class_obj, teacher = _resolve_class_and_teacher(db, subject_in.class_id, subject_in.teacher_id)

        if not class_obj.has_teacher(teacher.id):
            db.add_teacher_to_class(class_obj, teacher)
            logger.info(f"Auto-assigning teacher {teacher.id} to class {class_obj.id}")

        if db.get_subject_by_name_and_class(subject_in.name, class_obj.id):
            raise ConflictError("Subject already exists for this class")

        subject = db.add_subject({
            "id": f"sub_{uuid.uuid4().hex[:12]}",
            "name": subject_in.name,
            "description": subject_in.description,
            "class_id": class_obj.id,
            "teacher_id": teacher.id,
        })
    logger.info(f"Created subject {subject.id} ({subject.name}) in class {subject.class_id}")
    return subject


def _class_details(class_obj: Class, subjects: List[Subject]) -> Dict:
    return {
        "id": class_obj.id,
        "name": class_obj.name,
        "description": class_obj.description,
        "teachers": class_obj.teachers,
        "created_at": class_obj.created_at,
        "subjects": subjects,
    }


def get_all_classes_with_subjects(db: DatabaseService, actor: User) -> List[Dict]:
    decide(actor, Action.LIST_CLASSES).enforce()
    return [_class_details(c, db.get_subjects_by_class_id(c.id)) for c in db.get_all_classes()]


# --- Teacher views ---

def get_teacher_classes(db: DatabaseService, actor: User) -> List[Dict]:
    """Classes the teacher is attached to, each with only the subjects they own there."""
    decide(actor, Action.LIST_TEACHER_CLASSES).enforce()
    return [
        _class_details(c, db.get_subjects_for_teacher_in_class(c.id, actor.id))
        for c in db.get_classes_for_teacher(actor.id)
    ]


def _load_managed_subject(db: DatabaseService, actor: User, subject_id: str) -> Subject:
    authorize_role(actor, Action.MANAGE_SUBJECT).enforce()
    subject = db.get_subject_by_id(subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    decide(actor, Action.MANAGE_SUBJECT, subject).enforce()
    return subject


def get_subject_students(db: DatabaseService, actor: User, subject_id: str) -> Dict:
    """Approved students of the subject's class."""
    subject = _load_managed_subject(db, actor, subject_id)
    students = db.get_roster(subject.class_id)
    return {"subject": subject.name, "count": len(students), "students": students}


# --- Student views ---

def get_class_subjects(db: DatabaseService, actor: User, class_id: Optional[str] = None) -> Dict:
    """
    Subjects of a class. Students always get their own class; admins may ask
    for any class.
    """
    authorize_role(actor, Action.LIST_CLASS_SUBJECTS).enforce()
    if class_id is None:
        class_id = actor.class_id
        if class_id is None:
            raise NotFoundError("You are not assigned to any class")

    class_obj = db.get_class_by_id(class_id)
    if not class_obj:
        raise NotFoundError("Class not found")
    decide(actor, Action.LIST_CLASS_SUBJECTS, class_obj.id).enforce()

    subjects = db.get_subjects_by_class_id(class_obj.id)
    return {"class_name": class_obj.name, "count": len(subjects), "subjects": subjects}
