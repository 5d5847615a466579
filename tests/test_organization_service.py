# /tests/test_organization_service.py

import pytest

from lms.core.errors import ConflictError, ForbiddenError, NotFoundError, PendingApprovalError
from lms.models.class_model import ClassCreate, SubjectCreate
from lms.models.enums import ApprovalStatus, Role
from lms.services import organization_service


def _subject_in(class_obj, teacher, name="Mathematics"):
    return SubjectCreate(name=name, description="Core subject", class_id=class_obj.id, teacher_id=teacher.id)


# --- Classes ---

def test_create_class(db, admin):
    new_class = organization_service.create_class(db, admin, ClassCreate(name="Grade 9", description="Morning batch"))
    assert new_class.id.startswith("cls_")
    assert db.get_class_by_name("Grade 9").id == new_class.id


def test_create_class_with_taken_name_conflicts(db, admin, school_class):
    with pytest.raises(ConflictError, match="Class already exists"):
        organization_service.create_class(db, admin, ClassCreate(name=school_class.name))


def test_only_admins_create_classes(db, teacher):
    with pytest.raises(ForbiddenError):
        organization_service.create_class(db, teacher, ClassCreate(name="Grade 9"))


# --- Teacher assignment ---

def test_assign_teacher_twice_conflicts_and_keeps_one_entry(db, admin, teacher, school_class):
    organization_service.assign_teacher_to_class(db, admin, school_class.id, teacher.id)
    with pytest.raises(ConflictError, match="already assigned"):
        organization_service.assign_teacher_to_class(db, admin, school_class.id, teacher.id)

    refreshed = db.get_class_by_id(school_class.id)
    assert [t.id for t in refreshed.teachers] == [teacher.id]


def test_assign_unknown_teacher_is_not_found(db, admin, school_class, approved_student):
    # A student id is not a teacher id.
    with pytest.raises(NotFoundError, match="Teacher not found"):
        organization_service.assign_teacher_to_class(db, admin, school_class.id, approved_student.id)


# --- Subjects ---

def test_create_subject_auto_assigns_teacher(db, admin, teacher, school_class):
    assert not school_class.has_teacher(teacher.id)
    subject = organization_service.create_subject(db, admin, _subject_in(school_class, teacher))

    assert subject.teacher_id == teacher.id
    assert db.get_class_by_id(school_class.id).has_teacher(teacher.id)


def test_duplicate_subject_in_same_class_conflicts(db, admin, teacher, school_class):
    organization_service.create_subject(db, admin, _subject_in(school_class, teacher))
    with pytest.raises(ConflictError, match="Subject already exists for this class"):
        organization_service.create_subject(db, admin, _subject_in(school_class, teacher))
    assert len(db.get_subjects_by_class_id(school_class.id)) == 1


def test_same_subject_name_in_another_class_is_allowed(db, admin, teacher, make_class):
    first, second = make_class(name="Grade 8"), make_class(name="Grade 9")
    organization_service.create_subject(db, admin, _subject_in(first, teacher))
    subject = organization_service.create_subject(db, admin, _subject_in(second, teacher))
    assert subject.class_id == second.id


def test_conflicting_subject_rolls_back_auto_assignment(db, admin, make_user, make_subject, school_class):
    owner = make_user(role=Role.TEACHER)
    make_subject(school_class, owner, name="Mathematics")
    newcomer = make_user(role=Role.TEACHER)

    with pytest.raises(ConflictError):
        organization_service.create_subject(db, admin, _subject_in(school_class, newcomer))

    teacher_ids = {t.id for t in db.get_class_by_id(school_class.id).teachers}
    assert newcomer.id not in teacher_ids
    assert db.get_classes_for_teacher(newcomer.id) == []


def test_create_subject_for_missing_class_is_not_found(db, admin, teacher):
    subject_in = SubjectCreate(name="Art", class_id="cls_missing", teacher_id=teacher.id)
    with pytest.raises(NotFoundError, match="Class not found"):
        organization_service.create_subject(db, admin, subject_in)


# --- Listings ---

def test_teacher_classes_list_only_owned_subjects(db, make_user, make_subject, school_class, teacher):
    other = make_user(role=Role.TEACHER)
    mine = make_subject(school_class, teacher, name="Physics")
    make_subject(school_class, other, name="Chemistry")

    classes = organization_service.get_teacher_classes(db, teacher)

    assert len(classes) == 1
    assert [s.id for s in classes[0]["subjects"]] == [mine.id]


def test_subject_students_are_the_approved_roster(db, teacher, subject, approved_student, pending_student):
    result = organization_service.get_subject_students(db, teacher, subject.id)
    assert result["subject"] == "Physics"
    assert [s.id for s in result["students"]] == [approved_student.id]


def test_subject_students_for_foreign_subject_is_forbidden(db, make_user, subject):
    stranger = make_user(role=Role.TEACHER)
    with pytest.raises(ForbiddenError, match="Subject not assigned to you"):
        organization_service.get_subject_students(db, stranger, subject.id)


def test_student_lists_own_class_subjects(db, subject, approved_student, school_class):
    result = organization_service.get_class_subjects(db, approved_student)
    assert result["class_name"] == school_class.name
    assert result["count"] == 1


def test_pending_student_cannot_list_subjects(db, subject, pending_student):
    with pytest.raises(PendingApprovalError):
        organization_service.get_class_subjects(db, pending_student)


def test_student_without_class_gets_not_found(db, make_user):
    student = make_user(role=Role.STUDENT, status=ApprovalStatus.APPROVED, class_id=None)
    with pytest.raises(NotFoundError):
        organization_service.get_class_subjects(db, student)
