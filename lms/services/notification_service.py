# /lms/services/notification_service.py

"""
The notification fan-out engine and the rest of the messaging logic.

Three events create communications:

- a material upload fans out one unread notification per approved student
  of the subject's class, driven by a `NotificationOutbox` entry;
- a student query creates one message to the subject's teacher;
- a teacher reply marks the original read and creates one message back to
  its sender, linked to it through `parent_id`.

Every record is validated as a `CommunicationDraft` before anything is
written.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from lms.core.errors import ConflictError, DependencyFailedError, LMSError, NotFoundError, validate_or_fail
from lms.db.models.communication_models import Communication
from lms.db.models.user_model import User
from lms.models.communication_model import CommunicationDraft, RedriveResult
from lms.models.enums import CommunicationStatus, OutboxEvent, OutboxStatus, Role
from .access_control import Action, authorize_role, decide
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

MATERIAL_MESSAGE_TEMPLATE = 'New {type} material "{title}" added to {subject}'


@dataclass
class FanOutResult:
    notified: int = 0
    # (email, name) of every notified student, for the best-effort email mirror.
    recipients: List[Tuple[str, str]] = field(default_factory=list)


def _draft(**data) -> CommunicationDraft:
    return validate_or_fail(CommunicationDraft, **data)


def _record(draft: CommunicationDraft) -> Dict:
    return {
        "id": f"com_{uuid.uuid4().hex[:12]}",
        "status": CommunicationStatus.UNREAD.value,
        **draft.model_dump(),
    }


# --- Material fan-out ---

def enqueue_material_fanout(db: DatabaseService, material_id: str) -> str:
    """Stages the outbox entry for a new material. Must run inside the material's transaction."""
    entry = db.add_outbox_entry({
        "id": f"obx_{uuid.uuid4().hex[:12]}",
        "event": OutboxEvent.MATERIAL_UPLOADED.value,
        "material_id": material_id,
    })
    return entry.id


def _record_failure(db: DatabaseService, entry_id: str, error: Exception) -> None:
    try:
        with db.transaction():
            entry = db.get_outbox_entry(entry_id)
            if entry is not None:
                entry.attempts = (entry.attempts or 0) + 1
                entry.last_error = str(error)[:500]
    except LMSError:
        logger.exception(f"Could not record fan-out failure on outbox entry {entry_id}")


def dispatch_outbox_entry(db: DatabaseService, entry_id: str) -> FanOutResult:
    """
    Delivers one pending material fan-out.

    Everything runs in one transaction: the entry, material and roster
    reads, the conditional claim of the entry, and the notification batch.
    Only the dispatcher whose claim flips the entry from pending to
    delivered inserts notifications, so concurrent dispatchers never
    duplicate a batch. A failed dispatch leaves no notifications behind.
    The entry stays pending with the error recorded, and a
    `DependencyFailedError` is raised.
    """
    material_id = None
    try:
        with db.transaction():
            entry = db.get_outbox_entry(entry_id)
            if not entry:
                raise NotFoundError("Outbox entry not found")
            if entry.status == OutboxStatus.DELIVERED.value:
                return FanOutResult()

            material = entry.material
            material_id = material.id
            subject = material.subject
            message = MATERIAL_MESSAGE_TEMPLATE.format(type=material.type, title=material.title, subject=subject.name)

            students = db.get_roster(subject.class_id)
            records = [
                _record(_draft(
                    sender_id=material.created_by,
                    recipient_id=student.id,
                    subject_id=subject.id,
                    class_id=subject.class_id,
                    message=message,
                ))
                for student in students
            ]

            if not db.claim_outbox_entry(entry_id, datetime.now(timezone.utc)):
                logger.info(f"Outbox entry {entry_id} was delivered by another dispatcher")
                return FanOutResult()
            if records:
                db.add_communications(records)
            result = FanOutResult(notified=len(records), recipients=[(s.email, s.name) for s in students])
    except (DependencyFailedError, ConflictError) as e:
        logger.error(f"Fan-out for outbox entry {entry_id} failed; entry kept pending: {e}")
        _record_failure(db, entry_id, e)
        raise DependencyFailedError(
            "Material saved but notifying students failed; the notification is queued for retry",
            {"material_id": material_id, "outbox_id": entry_id},
        ) from e

    logger.info(f"Fan-out for material {material_id} delivered {result.notified} notifications")
    return result


def redrive_pending_notifications(db: DatabaseService) -> RedriveResult:
    """Re-dispatches every pending outbox entry, oldest first."""
    pending_ids = [entry.id for entry in db.get_pending_outbox_entries()]
    delivered = notified = 0
    for entry_id in pending_ids:
        try:
            result = dispatch_outbox_entry(db, entry_id)
        except DependencyFailedError:
            # Already logged and recorded on the entry; the next redrive retries it.
            continue
        delivered += 1
        notified += result.notified
    if pending_ids:
        logger.info(f"Redrive: {delivered}/{len(pending_ids)} pending fan-outs delivered")
    return RedriveResult(attempted=len(pending_ids), delivered=delivered, notified=notified)


# --- Queries and replies ---

def send_query(db: DatabaseService, actor: User, subject_id: str, message: str) -> Communication:
    """A student's question to the teacher of one of their class's subjects."""
    authorize_role(actor, Action.QUERY_TEACHER).enforce()
    subject = db.get_subject_by_id(subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    decide(actor, Action.QUERY_TEACHER, subject).enforce()

    draft = _draft(
        sender_id=actor.id,
        recipient_id=subject.teacher_id,
        subject_id=subject.id,
        class_id=actor.class_id,
        message=message,
    )
    with db.transaction():
        communication = db.add_communication(_record(draft))
    logger.info(f"Student {actor.id} sent query {communication.id} to teacher {subject.teacher_id}")
    return communication


def reply(db: DatabaseService, actor: User, communication_id: str, message: str) -> Communication:
    """
    Answers a communication addressed to the actor. The original is marked
    read and the reply goes back to its sender in the same transaction.
    """
    authorize_role(actor, Action.REPLY_COMMUNICATION).enforce()
    original = db.get_communication_by_id(communication_id)
    if not original:
        raise NotFoundError("Communication not found")
    decide(actor, Action.REPLY_COMMUNICATION, original).enforce()

    draft = _draft(
        sender_id=actor.id,
        recipient_id=original.sender_id,
        subject_id=original.subject_id,
        class_id=original.class_id,
        message=message,
        parent_id=original.id,
    )
    with db.transaction():
        original.status = CommunicationStatus.READ.value
        response = db.add_communication(_record(draft))
    logger.info(f"{actor.role} {actor.id} replied to {communication_id} with {response.id}")
    return response


def mark_as_read(db: DatabaseService, actor: User, communication_id: str) -> Communication:
    """Flips a communication to read. Already-read records are returned unchanged."""
    authorize_role(actor, Action.MARK_READ).enforce()
    communication = db.get_communication_by_id(communication_id)
    if not communication:
        raise NotFoundError("Notification not found")
    decide(actor, Action.MARK_READ, communication).enforce()

    if communication.status == CommunicationStatus.READ.value:
        return communication
    with db.transaction():
        communication.status = CommunicationStatus.READ.value
    return communication


# --- Listings ---

def get_notifications(db: DatabaseService, actor: User) -> List[Communication]:
    decide(actor, Action.READ_NOTIFICATIONS).enforce()
    return db.get_communications_for_recipient(actor.id)


def get_unread_count(db: DatabaseService, actor: User) -> int:
    decide(actor, Action.READ_NOTIFICATIONS).enforce()
    return db.count_unread_for_recipient(actor.id)


def get_all_communications(db: DatabaseService, actor: User) -> List[Communication]:
    decide(actor, Action.READ_NOTIFICATIONS).enforce()
    return db.get_communications_involving(actor.id)


def get_conversation_with_teacher(db: DatabaseService, actor: User, teacher_id: str) -> List[Communication]:
    decide(actor, Action.VIEW_CONVERSATION).enforce()
    if not db.get_teacher_by_id(teacher_id):
        raise NotFoundError("Teacher not found")
    return db.get_conversation(actor.id, teacher_id)


def get_subject_communications(db: DatabaseService, actor: User, subject_id: str) -> List[Communication]:
    """Messages about an owned subject addressed to its teacher, newest first."""
    authorize_role(actor, Action.MANAGE_SUBJECT).enforce()
    subject = db.get_subject_by_id(subject_id)
    if not subject:
        raise NotFoundError("Subject not found")
    decide(actor, Action.MANAGE_SUBJECT, subject).enforce()
    recipient_id = actor.id if actor.role == Role.TEACHER.value else subject.teacher_id
    return db.get_subject_communications_for_recipient(subject.id, recipient_id)
