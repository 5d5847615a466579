# /tests/test_access_control.py

import pytest
from types import SimpleNamespace

from lms.core.errors import ErrorKind, ForbiddenError, PendingApprovalError, UnauthenticatedError
from lms.models.enums import Role
from lms.services.access_control import Action, POLICIES, authorize_role, decide

# --- Lightweight stand-ins: the core only reads attributes ---

def _actor(role, status="approved", class_id=None, id="usr_actor"):
    return SimpleNamespace(id=id, role=role.value, status=status, class_id=class_id, is_approved=status == "approved")


def _subject(class_id="cls_1", teacher_id="usr_teacher", id="sub_1"):
    return SimpleNamespace(id=id, class_id=class_id, teacher_id=teacher_id)


def _material(subject):
    return SimpleNamespace(id="mat_1", subject=subject)


def _communication(recipient_id):
    return SimpleNamespace(id="com_1", recipient_id=recipient_id)


GATED_ACTIONS = [action for action, policy in POLICIES.items() if policy.approval_gated and Role.STUDENT in policy.roles]


def test_every_action_has_a_policy():
    assert set(POLICIES) == set(Action)


def test_missing_actor_is_unauthenticated():
    decision = decide(None, Action.READ_PROFILE)
    assert not decision
    assert decision.reason == ErrorKind.UNAUTHENTICATED
    with pytest.raises(UnauthenticatedError):
        decision.enforce()


@pytest.mark.parametrize("status", ["pending", "rejected"])
@pytest.mark.parametrize("action", GATED_ACTIONS)
def test_unapproved_student_is_gated_regardless_of_resource(action, status):
    """Even a resource that would otherwise be allowed yields PendingApproval."""
    student = _actor(Role.STUDENT, status=status, class_id="cls_1")
    own_subject = _subject(class_id="cls_1")
    resources = [None, own_subject, _material(own_subject), "cls_1"]
    for resource in resources:
        decision = decide(student, action, resource)
        assert decision.reason == ErrorKind.PENDING_APPROVAL
        assert decision.message == "Your account is pending approval"


def test_pending_gate_raises_pending_approval_error():
    student = _actor(Role.STUDENT, status="pending", class_id="cls_1")
    with pytest.raises(PendingApprovalError):
        authorize_role(student, Action.QUERY_TEACHER).enforce()


def test_mark_read_is_not_approval_gated():
    student = _actor(Role.STUDENT, status="pending", id="usr_s")
    assert decide(student, Action.MARK_READ, _communication("usr_s"))


def test_role_outside_policy_is_forbidden():
    teacher = _actor(Role.TEACHER)
    decision = decide(teacher, Action.CREATE_CLASS)
    assert decision.reason == ErrorKind.FORBIDDEN
    with pytest.raises(ForbiddenError):
        decision.enforce()


def test_admin_cannot_upload_material():
    assert not decide(_actor(Role.ADMIN), Action.UPLOAD_MATERIAL, _subject())


# --- READ_MATERIAL for students ---

def test_student_reads_material_of_own_class():
    student = _actor(Role.STUDENT, class_id="cls_1")
    assert decide(student, Action.READ_MATERIAL, _material(_subject(class_id="cls_1")))


def test_student_cannot_read_material_of_other_class():
    student = _actor(Role.STUDENT, class_id="cls_1")
    decision = decide(student, Action.READ_MATERIAL, _material(_subject(class_id="cls_2")))
    assert decision.reason == ErrorKind.FORBIDDEN
    assert decision.message == "You do not have access to this material"


def test_student_without_class_is_denied():
    student = _actor(Role.STUDENT, class_id=None)
    assert not decide(student, Action.READ_MATERIAL, _material(_subject(class_id="cls_1")))
    assert not decide(student, Action.LIST_SUBJECT_MATERIALS, _subject(class_id="cls_1"))


# --- Teacher ownership ---

def test_teacher_owns_subject():
    teacher = _actor(Role.TEACHER, id="usr_teacher")
    assert decide(teacher, Action.UPLOAD_MATERIAL, _subject(teacher_id="usr_teacher"))
    assert decide(teacher, Action.READ_MATERIAL, _material(_subject(teacher_id="usr_teacher")))


def test_teacher_cannot_touch_subject_owned_by_someone_else():
    teacher = _actor(Role.TEACHER, id="usr_teacher")
    decision = decide(teacher, Action.UPLOAD_MATERIAL, _subject(teacher_id="usr_other"))
    assert decision.reason == ErrorKind.FORBIDDEN
    assert decision.message == "Subject not assigned to you"


def test_admin_manages_any_subject():
    assert decide(_actor(Role.ADMIN), Action.MANAGE_SUBJECT, _subject(teacher_id="usr_other"))


# --- Reviewing students ---

def _student_in_class(teacher_ids):
    class_obj = SimpleNamespace(id="cls_1", has_teacher=lambda tid: tid in teacher_ids)
    return SimpleNamespace(id="usr_student", class_=class_obj)


def test_teacher_reviews_student_of_assigned_class():
    teacher = _actor(Role.TEACHER, id="usr_teacher")
    assert decide(teacher, Action.REVIEW_STUDENT, _student_in_class({"usr_teacher"}))


def test_teacher_cannot_review_student_of_unassigned_class():
    teacher = _actor(Role.TEACHER, id="usr_teacher")
    decision = decide(teacher, Action.REVIEW_STUDENT, _student_in_class({"usr_other"}))
    assert decision.message == "You are not authorized to approve/reject this student"


def test_teacher_cannot_review_student_without_class():
    teacher = _actor(Role.TEACHER, id="usr_teacher")
    assert not decide(teacher, Action.REVIEW_STUDENT, SimpleNamespace(id="usr_student", class_=None))


# --- Recipient rules ---

@pytest.mark.parametrize("role", [Role.ADMIN, Role.TEACHER])
def test_only_the_recipient_may_reply(role):
    actor = _actor(role, id="usr_me")
    assert decide(actor, Action.REPLY_COMMUNICATION, _communication("usr_me"))
    decision = decide(actor, Action.REPLY_COMMUNICATION, _communication("usr_someone_else"))
    assert decision.message == "You are not authorized to reply to this message"


def test_students_cannot_reply():
    student = _actor(Role.STUDENT, id="usr_me")
    assert decide(student, Action.REPLY_COMMUNICATION, _communication("usr_me")).reason == ErrorKind.FORBIDDEN


def test_broadcast_without_recipient_cannot_be_marked_read():
    student = _actor(Role.STUDENT, id="usr_me")
    assert not decide(student, Action.MARK_READ, _communication(None))


def test_rule_without_resource_is_not_found():
    teacher = _actor(Role.TEACHER)
    assert decide(teacher, Action.MANAGE_SUBJECT).reason == ErrorKind.NOT_FOUND
