# /lms/services/database_helpers/communication_repository_sql.py

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from lms.db.models.communication_models import Communication, NotificationOutbox
from lms.models.enums import CommunicationStatus, OutboxStatus


class CommunicationRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Communication Methods ---

    def add_communication(self, record: Dict) -> Communication:
        new_communication = Communication(**record)
        self.db.add(new_communication)
        self.db.flush()
        return new_communication

    def add_communications(self, records: List[Dict]) -> List[Communication]:
        """Stages a whole fan-out batch at once."""
        new_communications = [Communication(**record) for record in records]
        self.db.add_all(new_communications)
        self.db.flush()
        return new_communications

    def get_communication_by_id(self, communication_id: str) -> Optional[Communication]:
        return self.db.query(Communication).filter(Communication.id == communication_id).first()

    def get_communications_for_recipient(self, recipient_id: str) -> List[Communication]:
        return (
            self.db.query(Communication)
            .filter(Communication.recipient_id == recipient_id)
            .order_by(Communication.created_at.desc())
            .all()
        )

    def count_unread_for_recipient(self, recipient_id: str) -> int:
        return (
            self.db.query(Communication)
            .filter(
                Communication.recipient_id == recipient_id,
                Communication.status == CommunicationStatus.UNREAD.value,
            )
            .count()
        )

    def get_subject_communications_for_recipient(self, subject_id: str, recipient_id: str) -> List[Communication]:
        return (
            self.db.query(Communication)
            .filter(Communication.subject_id == subject_id, Communication.recipient_id == recipient_id)
            .order_by(Communication.created_at.desc())
            .all()
        )

    def get_conversation(self, user_id: str, other_id: str) -> List[Communication]:
        """Both directions of traffic between two accounts, oldest first."""
        return (
            self.db.query(Communication)
            .filter(
                or_(
                    and_(Communication.sender_id == user_id, Communication.recipient_id == other_id),
                    and_(Communication.sender_id == other_id, Communication.recipient_id == user_id),
                )
            )
            .order_by(Communication.created_at.asc())
            .all()
        )

    def get_communications_involving(self, user_id: str) -> List[Communication]:
        return (
            self.db.query(Communication)
            .filter(or_(Communication.sender_id == user_id, Communication.recipient_id == user_id))
            .order_by(Communication.created_at.desc())
            .all()
        )

    # --- Outbox Methods ---

    def add_outbox_entry(self, record: Dict) -> NotificationOutbox:
        entry = NotificationOutbox(**record)
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_outbox_entry(self, entry_id: str) -> Optional[NotificationOutbox]:
        return self.db.query(NotificationOutbox).filter(NotificationOutbox.id == entry_id).first()

    def get_pending_outbox_entries(self) -> List[NotificationOutbox]:
        return (
            self.db.query(NotificationOutbox)
            .filter(NotificationOutbox.status == OutboxStatus.PENDING.value)
            .order_by(NotificationOutbox.created_at.asc())
            .all()
        )

    def claim_outbox_entry(self, entry_id: str, delivered_at: datetime) -> bool:
        """
        Flips a pending entry to delivered with a single conditional UPDATE.
        Returns False when another dispatcher got there first.
        """
        claimed = (
            self.db.query(NotificationOutbox)
            .filter(NotificationOutbox.id == entry_id, NotificationOutbox.status == OutboxStatus.PENDING.value)
            .update(
                {
                    NotificationOutbox.status: OutboxStatus.DELIVERED.value,
                    NotificationOutbox.attempts: NotificationOutbox.attempts + 1,
                    NotificationOutbox.delivered_at: delivered_at,
                },
                synchronize_session=False,
            )
        )
        return claimed == 1
