# /tests/test_user_service.py

import io

import pytest
from unittest.mock import patch
from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from lms.core import security
from lms.core.errors import ConflictError, DependencyFailedError, ForbiddenError, NotFoundError, PendingApprovalError, UnauthenticatedError
from lms.models.enums import ApprovalStatus, Role
from lms.models.user_model import LoginRequest, TeacherCreate, UserCreate
from lms.services import storage_service, user_service


def _registration(class_id, email="ada@school.com"):
    return UserCreate(
        name="Ada", email=email, password="secret1", contact_no="0123456789",
        roll_no="R-01", class_id=class_id,
    )


# --- Registration & login ---

def test_registered_student_starts_pending(db, school_class):
    response = user_service.register_student(db, _registration(school_class.id))

    assert response.user.role == Role.STUDENT
    assert response.user.status == ApprovalStatus.PENDING
    assert response.user.class_name == school_class.name
    assert security.decode_access_token(response.access_token) == response.user.id


def test_registration_with_taken_email_conflicts(db, school_class):
    user_service.register_student(db, _registration(school_class.id))
    with pytest.raises(ConflictError, match="User already exists with this email"):
        user_service.register_student(db, _registration(school_class.id))


def test_registration_for_unknown_class_is_not_found(db):
    with pytest.raises(NotFoundError, match="Class not found"):
        user_service.register_student(db, _registration("cls_missing"))


def test_email_is_normalised():
    assert _registration("cls_1", email="  Ada@School.COM ").email == "ada@school.com"


@pytest.mark.parametrize("email", ["jane+lms@school.org", "jane@school.info", "o'neil@school.org", "j.doe@mail.school.edu"])
def test_registration_accepts_common_address_forms(email):
    assert _registration("cls_1", email=email).email == email


@pytest.mark.parametrize("email", ["not-an-email", "jane@", "@school.org", "jane doe@school.org"])
def test_registration_rejects_malformed_address(email):
    with pytest.raises(ValidationError):
        _registration("cls_1", email=email)


def test_login_email_is_normalised():
    assert LoginRequest(email=" Jane+LMS@School.org", password="x").email == "jane+lms@school.org"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage_service.settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


def _picture():
    return UploadFile(file=io.BytesIO(b"\x89PNG"), filename="me.png")


def test_registration_stores_profile_picture(db, school_class, upload_dir):
    response = user_service.register_student(db, _registration(school_class.id), profile_pic=_picture())

    assert response.user.profile_pic.startswith("/files/profiles/")
    assert len(list((upload_dir / "profiles").iterdir())) == 1


def test_conflicting_registration_stores_no_picture(db, school_class, upload_dir):
    user_service.register_student(db, _registration(school_class.id))
    with pytest.raises(ConflictError):
        user_service.register_student(db, _registration(school_class.id), profile_pic=_picture())
    assert not (upload_dir / "profiles").exists()


def test_failed_account_write_removes_stored_picture(db, school_class, upload_dir):
    with patch.object(db, "add_user", side_effect=SQLAlchemyError("disk I/O error")):
        with pytest.raises(DependencyFailedError):
            user_service.register_student(db, _registration(school_class.id), profile_pic=_picture())
    assert list((upload_dir / "profiles").iterdir()) == []
    assert db.get_user_by_email("ada@school.com") is None


def test_pending_student_cannot_log_in(db, school_class):
    user_service.register_student(db, _registration(school_class.id))
    with pytest.raises(PendingApprovalError):
        user_service.authenticate(db, "ada@school.com", "secret1")


def test_wrong_password_is_unauthenticated(db, admin):
    with pytest.raises(UnauthenticatedError, match="Invalid credentials"):
        user_service.authenticate(db, admin.email, "nope")


def test_approved_student_logs_in(db, school_class, admin):
    registered = user_service.register_student(db, _registration(school_class.id))
    user_service.review_student(db, admin, registered.user.id, ApprovalStatus.APPROVED)

    response = user_service.authenticate(db, "ADA@school.com", "secret1")
    assert response.user.id == registered.user.id


def _bootstrap(db):
    with patch.object(user_service.settings, "ADMIN_EMAIL", "root@school.com"), \
         patch.object(user_service.settings, "ADMIN_PASSWORD", "rootpass"):
        return user_service.ensure_bootstrap_admin(db)


# --- Accounts created by admins ---

def test_admin_creates_approved_teacher(db, admin):
    teacher_in = TeacherCreate(name="Grace", email="grace@school.com", contact_no="555", password="secret1")
    teacher = user_service.create_teacher(db, admin, teacher_in)
    assert teacher.role == Role.TEACHER.value
    assert teacher.status == ApprovalStatus.APPROVED.value
    assert security.verify_password("secret1", teacher.hashed_password)


def test_teacher_cannot_create_teachers(db, teacher):
    teacher_in = TeacherCreate(name="Grace", email="grace@school.com", contact_no="555", password="secret1")
    with pytest.raises(ForbiddenError):
        user_service.create_teacher(db, teacher, teacher_in)


def test_bootstrap_admin_is_created_once(db):
    first = _bootstrap(db)
    assert first.role == Role.ADMIN.value
    assert _bootstrap(db) is None
    assert len(db.get_users_by_role(Role.ADMIN)) == 1


def test_bootstrap_admin_skipped_without_credentials(db):
    with patch.object(user_service.settings, "ADMIN_EMAIL", None):
        assert user_service.ensure_bootstrap_admin(db) is None


# --- Reviewing students ---

def test_teacher_of_class_approves_student(db, subject, teacher, pending_student):
    student = user_service.review_student(db, teacher, pending_student.id, ApprovalStatus.APPROVED)
    assert student.status == ApprovalStatus.APPROVED.value


def test_teacher_of_other_class_cannot_review(db, make_user, pending_student):
    outsider = make_user(role=Role.TEACHER)
    with pytest.raises(ForbiddenError, match="not authorized to approve/reject"):
        user_service.review_student(db, outsider, pending_student.id, ApprovalStatus.REJECTED)
    assert db.get_student_by_id(pending_student.id).status == ApprovalStatus.PENDING.value


def test_review_unknown_student_is_not_found(db, teacher):
    with pytest.raises(NotFoundError, match="Student not found"):
        user_service.review_student(db, teacher, "usr_missing", ApprovalStatus.APPROVED)


def test_pending_list_is_scoped_to_teacher_classes(db, make_class, make_user, subject, teacher, pending_student):
    elsewhere = make_class(name="Grade 12")
    make_user(role=Role.STUDENT, class_id=elsewhere.id)

    pending = user_service.list_pending_students(db, teacher)

    assert [s.id for s in pending] == [pending_student.id]


def test_pending_student_profile_is_gated(pending_student):
    with pytest.raises(PendingApprovalError):
        user_service.get_profile(pending_student)
