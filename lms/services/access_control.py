# /lms/services/access_control.py

"""
The access-control core: one pure function, `decide(actor, action, resource)`.

It performs no queries and raises nothing. Callers load the actor and the
resource (with the relationships the rule needs) and get back a `Decision`.
Services call `decision.enforce()` to turn a deny into the matching
`LMSError`.

Evaluation order, first applicable step wins:

1. no actor                                   -> Unauthenticated
2. actor's role not allowed for the action    -> Forbidden
3. student, gated action, not approved        -> PendingApproval
4. no rule for the actor's role               -> Permit
5. the role's rule for the action             -> Permit / Forbidden

Class-level teacher membership and subject ownership are separate facts.
A teacher attached to a class does not own its subjects, and owning a
subject says nothing about the class's teacher list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional

from lms.core.errors import ErrorKind, error_for
from lms.models.enums import Role


class Action(str, Enum):
    # Student-facing (approval-gated for students)
    READ_PROFILE = "read_profile"
    LIST_CLASS_SUBJECTS = "list_class_subjects"
    READ_MATERIAL = "read_material"
    LIST_SUBJECT_MATERIALS = "list_subject_materials"
    QUERY_TEACHER = "query_teacher"
    READ_NOTIFICATIONS = "read_notifications"
    VIEW_CONVERSATION = "view_conversation"

    # Any recipient
    MARK_READ = "mark_read"

    # Teacher-facing
    LIST_TEACHER_CLASSES = "list_teacher_classes"
    LIST_PENDING_STUDENTS = "list_pending_students"
    REVIEW_STUDENT = "review_student"
    MANAGE_SUBJECT = "manage_subject"
    UPLOAD_MATERIAL = "upload_material"
    REPLY_COMMUNICATION = "reply_communication"

    # Admin-scoped
    CREATE_CLASS = "create_class"
    ADD_TEACHER = "add_teacher"
    ASSIGN_TEACHER = "assign_teacher"
    CREATE_SUBJECT = "create_subject"
    LIST_ACCOUNTS = "list_accounts"
    LIST_CLASSES = "list_classes"
    EXPORT_RECORDS = "export_records"
    REDRIVE_NOTIFICATIONS = "redrive_notifications"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[ErrorKind] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.allowed

    def enforce(self) -> None:
        """Raises the `LMSError` matching the deny reason; no-op on permit."""
        if not self.allowed:
            raise error_for(self.reason, self.message)


PERMIT = Decision(True)


def deny(reason: ErrorKind, message: str) -> Decision:
    return Decision(False, reason, message)


Rule = Callable[[Any, Any], Decision]


@dataclass(frozen=True)
class Policy:
    roles: FrozenSet[Role]
    approval_gated: bool = False
    # Roles listed here are checked against the resource; allowed roles
    # without a rule are permitted outright.
    rules: Dict[Role, Rule] = field(default_factory=dict)


# --- Resource rules ---
# Each rule receives the actor and the resource handed to `decide`. They are
# plain equality tests on ids that are already loaded.

def _student_in_class(actor, class_id: Optional[str], message: str) -> Decision:
    if actor.class_id is not None and actor.class_id == class_id:
        return PERMIT
    return deny(ErrorKind.FORBIDDEN, message)


def _teacher_owns_subject(actor, subject, message: str) -> Decision:
    if subject is not None and subject.teacher_id == actor.id:
        return PERMIT
    return deny(ErrorKind.FORBIDDEN, message)


def _student_class_of_subject(actor, subject) -> Decision:
    return _student_in_class(actor, subject.class_id, "You do not have access to this subject")


def _student_class_of_material(actor, material) -> Decision:
    class_id = material.subject.class_id if material.subject is not None else None
    return _student_in_class(actor, class_id, "You do not have access to this material")


def _student_own_class(actor, class_id) -> Decision:
    return _student_in_class(actor, class_id, "You do not have access to this class")


def _teacher_subject(actor, subject) -> Decision:
    return _teacher_owns_subject(actor, subject, "Subject not assigned to you")


def _teacher_material(actor, material) -> Decision:
    return _teacher_owns_subject(actor, material.subject, "You do not have access to this material")


def _teacher_in_student_class(actor, student) -> Decision:
    class_obj = student.class_
    if class_obj is not None and class_obj.has_teacher(actor.id):
        return PERMIT
    return deny(ErrorKind.FORBIDDEN, "You are not authorized to approve/reject this student")


def _is_recipient(message: str) -> Rule:
    def rule(actor, communication) -> Decision:
        if communication.recipient_id is not None and communication.recipient_id == actor.id:
            return PERMIT
        return deny(ErrorKind.FORBIDDEN, message)
    return rule


_ALL = frozenset(Role)
_STAFF = frozenset({Role.ADMIN, Role.TEACHER})
_ADMIN = frozenset({Role.ADMIN})

_reply_rule = _is_recipient("You are not authorized to reply to this message")
_read_rule = _is_recipient("Notification not addressed to you")

POLICIES: Dict[Action, Policy] = {
    Action.READ_PROFILE: Policy(_ALL, approval_gated=True),
    Action.LIST_CLASS_SUBJECTS: Policy(
        frozenset({Role.ADMIN, Role.STUDENT}), approval_gated=True,
        rules={Role.STUDENT: _student_own_class},
    ),
    Action.READ_MATERIAL: Policy(
        _ALL, approval_gated=True,
        rules={Role.STUDENT: _student_class_of_material, Role.TEACHER: _teacher_material},
    ),
    Action.LIST_SUBJECT_MATERIALS: Policy(
        _ALL, approval_gated=True,
        rules={Role.STUDENT: _student_class_of_subject, Role.TEACHER: _teacher_subject},
    ),
    Action.QUERY_TEACHER: Policy(
        frozenset({Role.STUDENT}), approval_gated=True,
        rules={Role.STUDENT: _student_class_of_subject},
    ),
    Action.READ_NOTIFICATIONS: Policy(_ALL, approval_gated=True),
    Action.VIEW_CONVERSATION: Policy(frozenset({Role.STUDENT}), approval_gated=True),
    Action.MARK_READ: Policy(
        _ALL,
        rules={Role.ADMIN: _read_rule, Role.TEACHER: _read_rule, Role.STUDENT: _read_rule},
    ),
    Action.LIST_TEACHER_CLASSES: Policy(_STAFF),
    Action.LIST_PENDING_STUDENTS: Policy(_STAFF),
    Action.REVIEW_STUDENT: Policy(_STAFF, rules={Role.TEACHER: _teacher_in_student_class}),
    Action.MANAGE_SUBJECT: Policy(_STAFF, rules={Role.TEACHER: _teacher_subject}),
    Action.UPLOAD_MATERIAL: Policy(frozenset({Role.TEACHER}), rules={Role.TEACHER: _teacher_subject}),
    Action.REPLY_COMMUNICATION: Policy(
        _STAFF, rules={Role.ADMIN: _reply_rule, Role.TEACHER: _reply_rule},
    ),
    Action.CREATE_CLASS: Policy(_ADMIN),
    Action.ADD_TEACHER: Policy(_ADMIN),
    Action.ASSIGN_TEACHER: Policy(_ADMIN),
    Action.CREATE_SUBJECT: Policy(_ADMIN),
    Action.LIST_ACCOUNTS: Policy(_ADMIN),
    Action.LIST_CLASSES: Policy(_ADMIN),
    Action.EXPORT_RECORDS: Policy(_ADMIN),
    Action.REDRIVE_NOTIFICATIONS: Policy(_ADMIN),
}


def _check_policies() -> None:
    missing = set(Action) - set(POLICIES)
    if missing:
        raise RuntimeError(f"Actions without a policy: {sorted(a.value for a in missing)}")
    for action, policy in POLICIES.items():
        stray = set(policy.rules) - set(policy.roles)
        if stray:
            raise RuntimeError(f"{action.value} has rules for roles it does not allow: {stray}")


_check_policies()


def _role_of(actor) -> Optional[Role]:
    try:
        return Role(actor.role)
    except ValueError:
        return None


def authorize_role(actor, action: Action) -> Decision:
    """
    Steps 1-3 only: who the actor is, never what they touch. Services call
    this before loading the resource, so an unapproved student is told so
    whatever ids they sent.
    """
    if actor is None:
        return deny(ErrorKind.UNAUTHENTICATED, "Unauthorized - No user found")

    policy = POLICIES[action]
    role = _role_of(actor)
    if role is None or role not in policy.roles:
        return deny(ErrorKind.FORBIDDEN, f"Restricted access - {actor.role} not authorized")

    if role == Role.STUDENT and policy.approval_gated and not actor.is_approved:
        return deny(ErrorKind.PENDING_APPROVAL, "Your account is pending approval")

    return PERMIT


def decide(actor, action: Action, resource: Any = None) -> Decision:
    """Decides whether `actor` may perform `action` on `resource`."""
    gate = authorize_role(actor, action)
    if not gate:
        return gate

    rule = POLICIES[action].rules.get(_role_of(actor))
    if rule is None:
        return PERMIT
    if resource is None:
        return deny(ErrorKind.NOT_FOUND, "Resource not found")
    return rule(actor, resource)
