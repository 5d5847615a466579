# /lms/services/user_service.py

"""
Business logic for accounts: registration, login, profile, the first admin
account, and the teacher's approve/reject decision on pending students.
"""

import logging
import uuid
from typing import Dict, List, Optional

from fastapi import UploadFile

from lms.core import security
from lms.core.config import settings
from lms.core.errors import ConflictError, LMSError, NotFoundError, PendingApprovalError, UnauthenticatedError
from lms.db.models.user_model import User
from lms.models.enums import ApprovalStatus, Role
from lms.models.user_model import AuthResponse, TeacherCreate, UserCreate, User as UserSchema
from . import storage_service
from .access_control import Action, authorize_role, decide
from .database_service import DatabaseService

logger = logging.getLogger(__name__)


def _new_account(db: DatabaseService, record: Dict) -> User:
    """
    Stages a new account. Admins and teachers are approved on creation;
    students start pending. Must run inside a transaction.
    """
    if db.get_user_by_email(record["email"]):
        raise ConflictError("User already exists with this email")

    password = record.pop("password")
    role = record["role"]
    record["id"] = f"usr_{uuid.uuid4().hex[:12]}"
    record["hashed_password"] = security.hash_password(password)
    record["status"] = (
        ApprovalStatus.APPROVED.value if role in (Role.ADMIN.value, Role.TEACHER.value)
        else ApprovalStatus.PENDING.value
    )
    record.setdefault("profile_pic", None)
    if not record["profile_pic"]:
        record["profile_pic"] = settings.DEFAULT_PROFILE_PIC
    return db.add_user(record)


def register_student(db: DatabaseService, user_in: UserCreate, profile_pic: Optional[UploadFile] = None) -> AuthResponse:
    """
    Self-registration. The account is created pending; the returned token is
    only useful once a teacher of the student's class approves it.

    The profile picture is stored only after the class and email checks
    pass, and is removed again if the account is not committed.
    """
    profile_pic_url = None
    try:
        with db.transaction():
            if not db.get_class_by_id(user_in.class_id):
                raise NotFoundError("Class not found")
            if db.get_user_by_email(user_in.email):
                raise ConflictError("User already exists with this email")
            if profile_pic is not None and profile_pic.filename:
                profile_pic_url = storage_service.store(profile_pic, folder="profiles")
            user = _new_account(db, {
                **user_in.model_dump(),
                "role": Role.STUDENT.value,
                "profile_pic": profile_pic_url,
            })
    except LMSError:
        storage_service.discard(profile_pic_url)
        raise
    logger.info(f"Registered student {user.id} for class {user.class_id}; awaiting approval")
    return AuthResponse(
        access_token=security.create_access_token(subject=user.id),
        user=UserSchema.model_validate(user),
    )


def create_teacher(db: DatabaseService, actor: User, teacher_in: TeacherCreate) -> User:
    decide(actor, Action.ADD_TEACHER).enforce()
    with db.transaction():
        teacher = _new_account(db, {**teacher_in.model_dump(), "role": Role.TEACHER.value})
    logger.info(f"Admin {actor.id} created teacher {teacher.id}")
    return teacher


def ensure_bootstrap_admin(db: DatabaseService) -> Optional[User]:
    """
    Creates the configured admin account when ADMIN_EMAIL/ADMIN_PASSWORD are
    set and no admin exists yet. Returns the new admin, or None.
    """
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return None
    if db.get_users_by_role(Role.ADMIN):
        return None
    with db.transaction():
        admin = _new_account(db, {
            "name": settings.ADMIN_NAME,
            "email": settings.ADMIN_EMAIL.strip().lower(),
            "password": settings.ADMIN_PASSWORD,
            "contact_no": settings.ADMIN_CONTACT_NO,
            "role": Role.ADMIN.value,
        })
    logger.info(f"Created bootstrap admin account {admin.email}")
    return admin


def authenticate(db: DatabaseService, email: str, password: str) -> AuthResponse:
    user = db.get_user_by_email(email.strip().lower())
    if not user or not security.verify_password(password, user.hashed_password):
        raise UnauthenticatedError("Invalid credentials")
    if user.status != ApprovalStatus.APPROVED.value and user.role != Role.ADMIN.value:
        raise PendingApprovalError("Your account is pending approval")
    return AuthResponse(
        access_token=security.create_access_token(subject=user.id),
        user=UserSchema.model_validate(user),
    )


def get_profile(actor: User) -> User:
    decide(actor, Action.READ_PROFILE).enforce()
    return actor


def list_accounts(db: DatabaseService, actor: User, role: Role) -> List[User]:
    decide(actor, Action.LIST_ACCOUNTS).enforce()
    return db.get_users_by_role(role)


def list_pending_students(db: DatabaseService, actor: User) -> List[User]:
    """Pending students of the teacher's classes (every class, for admins)."""
    decide(actor, Action.LIST_PENDING_STUDENTS).enforce()
    if actor.role == Role.ADMIN.value:
        classes = db.get_all_classes()
    else:
        classes = db.get_classes_for_teacher(actor.id)
    return db.get_pending_students([c.id for c in classes])


def review_student(db: DatabaseService, actor: User, student_id: str, status: ApprovalStatus) -> User:
    """
    Approves or rejects a student. Teachers may only decide for students of
    a class they are attached to.
    """
    authorize_role(actor, Action.REVIEW_STUDENT).enforce()
    student = db.get_student_by_id(student_id)
    if not student:
        raise NotFoundError("Student not found")
    decide(actor, Action.REVIEW_STUDENT, student).enforce()

    with db.transaction():
        student.status = status.value
    logger.info(f"{actor.role} {actor.id} set student {student.id} to {status.value}")
    return student
