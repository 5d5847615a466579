# /tests/test_material_service.py

import io

import pytest
from unittest.mock import MagicMock
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError

from lms.core.errors import (
    DependencyFailedError, ForbiddenError, NotFoundError, PendingApprovalError, ValidationFailedError,
)
from lms.db.models.communication_models import Communication, NotificationOutbox
from lms.models.enums import ApprovalStatus, OutboxStatus, Role
from lms.services import material_service, storage_service


@pytest.fixture
def mock_store(mocker):
    """Blob storage is replaced so no file ever touches the disk."""
    return mocker.patch("lms.services.storage_service.store", return_value="/files/materials/abc.pdf")


@pytest.fixture
def upload_file():
    return UploadFile(file=io.BytesIO(b"%PDF-1.4"), filename="chapter1.pdf")


def _upload(db, actor, subject_id, upload_file, **overrides):
    fields = {"title": "Chapter 1", "material_type": "notes", "description": "Intro"}
    fields.update(overrides)
    return material_service.upload_material(
        db=db, actor=actor, file=upload_file, subject_id=subject_id, **fields
    )


def test_upload_records_material_and_notifies_class(db, mock_store, upload_file, subject, teacher, approved_student):
    outcome = _upload(db, teacher, subject.id, upload_file)

    assert outcome.material.file_url == "/files/materials/abc.pdf"
    assert outcome.material.created_by == teacher.id
    assert outcome.notified == 1
    assert outcome.recipients == [(approved_student.email, approved_student.name)]
    assert outcome.subject_name == "Physics"
    mock_store.assert_called_once_with(upload_file, folder="materials")


def test_upload_to_foreign_subject_is_forbidden_and_stores_nothing(db, mock_store, upload_file, make_user, subject):
    stranger = make_user(role=Role.TEACHER)
    with pytest.raises(ForbiddenError):
        _upload(db, stranger, subject.id, upload_file)
    mock_store.assert_not_called()


def test_upload_to_missing_subject_is_not_found(db, mock_store, upload_file, teacher):
    with pytest.raises(NotFoundError):
        _upload(db, teacher, "sub_missing", upload_file)


@pytest.mark.parametrize("overrides", [{"title": ""}, {"material_type": "podcast"}])
def test_invalid_fields_fail_before_storage(db, mock_store, upload_file, subject, teacher, overrides):
    with pytest.raises(ValidationFailedError):
        _upload(db, teacher, subject.id, upload_file, **overrides)
    mock_store.assert_not_called()


def test_upload_without_file_is_rejected(db, mock_store, subject, teacher):
    with pytest.raises(ValidationFailedError, match="Please upload a file"):
        _upload(db, teacher, subject.id, None)


def test_failed_fanout_reports_dependency_failure_but_keeps_material(db, mocker, mock_store, upload_file, subject, teacher, approved_student):
    mocker.patch.object(db, "add_communications", side_effect=DependencyFailedError("store down"))

    with pytest.raises(DependencyFailedError) as exc_info:
        _upload(db, teacher, subject.id, upload_file)

    material_id = exc_info.value.details["material_id"]
    assert db.get_material_by_id(material_id) is not None
    assert db.session.query(Communication).count() == 0
    entry = db.session.query(NotificationOutbox).one()
    assert entry.status == OutboxStatus.PENDING.value


def test_failed_material_write_removes_stored_file(db, mocker, monkeypatch, tmp_path, upload_file, subject, teacher):
    monkeypatch.setattr(storage_service.settings, "UPLOAD_DIR", str(tmp_path))
    mocker.patch.object(db, "add_material", side_effect=SQLAlchemyError("disk I/O error"))

    with pytest.raises(DependencyFailedError):
        _upload(db, teacher, subject.id, upload_file)

    assert list((tmp_path / "materials").iterdir()) == []
    assert db.session.query(NotificationOutbox).count() == 0


def test_failed_fanout_keeps_stored_file(db, mocker, monkeypatch, tmp_path, upload_file, subject, teacher, approved_student):
    monkeypatch.setattr(storage_service.settings, "UPLOAD_DIR", str(tmp_path))
    mocker.patch.object(db, "add_communications", side_effect=DependencyFailedError("store down"))

    with pytest.raises(DependencyFailedError):
        _upload(db, teacher, subject.id, upload_file)

    assert len(list((tmp_path / "materials").iterdir())) == 1


# --- Reading ---

def test_student_reads_material_of_own_class(db, mock_store, upload_file, subject, teacher, approved_student):
    material = _upload(db, teacher, subject.id, upload_file).material
    assert material_service.get_material(db, approved_student, material.id).id == material.id


def test_student_of_other_class_cannot_read_material(db, mock_store, upload_file, make_class, make_user, subject, teacher):
    material = _upload(db, teacher, subject.id, upload_file).material
    outsider = make_user(role=Role.STUDENT, status=ApprovalStatus.APPROVED, class_id=make_class(name="Grade 12").id)

    with pytest.raises(ForbiddenError, match="You do not have access to this material"):
        material_service.get_material(db, outsider, material.id)


def test_pending_student_is_gated_even_for_missing_material(db, pending_student):
    with pytest.raises(PendingApprovalError):
        material_service.get_material(db, pending_student, "mat_missing")


def test_subject_materials_newest_first(db, mock_store, subject, teacher, approved_student):
    for title in ("First", "Second"):
        _upload(db, teacher, subject.id, MagicMock(filename=f"{title}.pdf"), title=title)

    listing = material_service.get_subject_materials(db, approved_student, subject.id)

    assert listing["count"] == 2
    assert [m.title for m in listing["materials"]] == ["Second", "First"]
