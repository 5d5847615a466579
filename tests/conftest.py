# /tests/conftest.py

import os
import tempfile
import uuid

# Settings are read at import time, so the test environment must be in place
# before anything from `lms` is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="lms-uploads-"))
os.environ.pop("SMTP_HOST", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lms.core import security
from lms.db.base import Base
from lms.models.enums import ApprovalStatus, Role
from lms.services.database_service import DatabaseService

TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = security.hash_password(TEST_PASSWORD)


@pytest.fixture
def engine():
    """A fresh in-memory database per test; StaticPool keeps every session on the same connection."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield DatabaseService(session)
    session.close()


# --- Record factories ---

@pytest.fixture
def make_class(db):
    def _make(name=None, description=None):
        with db.transaction():
            return db.add_class({
                "id": f"cls_{uuid.uuid4().hex[:12]}",
                "name": name or f"Class {uuid.uuid4().hex[:6]}",
                "description": description,
            })
    return _make


@pytest.fixture
def make_user(db):
    def _make(role=Role.STUDENT, status=None, class_id=None, email=None, name=None):
        if status is None:
            status = ApprovalStatus.PENDING if role == Role.STUDENT else ApprovalStatus.APPROVED
        uid = uuid.uuid4().hex[:12]
        with db.transaction():
            return db.add_user({
                "id": f"usr_{uid}",
                "name": name or f"{role.value.title()} {uid[:4]}",
                "email": email or f"{role.value}.{uid}@school.com",
                "hashed_password": TEST_PASSWORD_HASH,
                "contact_no": "0123456789",
                "role": role.value,
                "status": status.value,
                "roll_no": f"R-{uid[:4]}" if role == Role.STUDENT else None,
                "class_id": class_id,
            })
    return _make


@pytest.fixture
def make_subject(db):
    def _make(class_obj, teacher, name=None, attach=True):
        with db.transaction():
            if attach and not class_obj.has_teacher(teacher.id):
                db.add_teacher_to_class(class_obj, teacher)
            return db.add_subject({
                "id": f"sub_{uuid.uuid4().hex[:12]}",
                "name": name or f"Subject {uuid.uuid4().hex[:6]}",
                "description": None,
                "class_id": class_obj.id,
                "teacher_id": teacher.id,
            })
    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN)


@pytest.fixture
def teacher(make_user):
    return make_user(role=Role.TEACHER)


@pytest.fixture
def school_class(make_class):
    return make_class(name="Grade 10 - A")


@pytest.fixture
def subject(make_subject, school_class, teacher):
    return make_subject(school_class, teacher, name="Physics")


@pytest.fixture
def approved_student(make_user, school_class):
    return make_user(role=Role.STUDENT, status=ApprovalStatus.APPROVED, class_id=school_class.id)


@pytest.fixture
def pending_student(make_user, school_class):
    return make_user(role=Role.STUDENT, status=ApprovalStatus.PENDING, class_id=school_class.id)
