# /lms/services/database_service.py

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Generator, Iterator, List, Optional, Sequence

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lms.core.errors import ConflictError, DependencyFailedError, LMSError
from lms.db.database import get_db
from lms.db.models.class_subject_models import Class, Subject
from lms.db.models.communication_models import Communication, NotificationOutbox
from lms.db.models.material_models import Material
from lms.db.models.user_model import User
from lms.models.enums import Role

from .database_helpers.user_repository_sql import UserRepositorySQL
from .database_helpers.class_subject_repository_sql import ClassSubjectRepositorySQL
from .database_helpers.material_repository_sql import MaterialRepositorySQL
from .database_helpers.communication_repository_sql import CommunicationRepositorySQL

logger = logging.getLogger(__name__)


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Facade over the SQL repositories. All repositories share one session,
        so anything staged inside `transaction()` commits or rolls back as a
        unit.
        """
        self.session = db_session
        self.user_repo = UserRepositorySQL(db_session)
        self.class_subject_repo = ClassSubjectRepositorySQL(db_session)
        self.material_repo = MaterialRepositorySQL(db_session)
        self.communication_repo = CommunicationRepositorySQL(db_session)

    @contextmanager
    def transaction(self) -> Iterator["DatabaseService"]:
        """
        Commits everything staged in the block, or rolls all of it back.

        Store errors leave as domain errors: integrity violations become
        `ConflictError`, any other SQLAlchemy failure `DependencyFailedError`.
        """
        try:
            yield self
            self.session.commit()
        except LMSError:
            self.session.rollback()
            raise
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity violation, transaction rolled back: {e.orig}")
            raise ConflictError("The record conflicts with an existing one") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Store error, transaction rolled back")
            raise DependencyFailedError(f"Database operation failed: {e.__class__.__name__}") from e
        except Exception:
            self.session.rollback()
            raise

    # --- USER METHODS (DELEGATED) ---
    def get_user_by_id(self, user_id: str) -> Optional[User]: return self.user_repo.get_user_by_id(user_id)
    def get_user_by_email(self, email: str) -> Optional[User]: return self.user_repo.get_user_by_email(email)
    def get_teacher_by_id(self, teacher_id: str) -> Optional[User]: return self.user_repo.get_user_by_id_and_role(teacher_id, Role.TEACHER)
    def get_student_by_id(self, student_id: str) -> Optional[User]: return self.user_repo.get_user_by_id_and_role(student_id, Role.STUDENT)
    def add_user(self, record: Dict) -> User: return self.user_repo.add_user(record)
    def get_users_by_role(self, role: Role) -> List[User]: return self.user_repo.get_users_by_role(role)
    def get_roster(self, class_id: str) -> List[User]: return self.user_repo.get_roster(class_id)
    def get_pending_students(self, class_ids: Sequence[str]) -> List[User]: return self.user_repo.get_pending_students(class_ids)

    # --- CLASS & SUBJECT METHODS (DELEGATED) ---
    def get_all_classes(self) -> List[Class]: return self.class_subject_repo.get_all_classes()
    def get_class_by_id(self, class_id: str) -> Optional[Class]: return self.class_subject_repo.get_class_by_id(class_id)
    def get_class_by_name(self, name: str) -> Optional[Class]: return self.class_subject_repo.get_class_by_name(name)
    def add_class(self, record: Dict) -> Class: return self.class_subject_repo.add_class(record)
    def add_teacher_to_class(self, class_obj: Class, teacher: User) -> Class: return self.class_subject_repo.add_teacher_to_class(class_obj, teacher)
    def get_classes_for_teacher(self, teacher_id: str) -> List[Class]: return self.class_subject_repo.get_classes_for_teacher(teacher_id)
    def get_all_subjects(self) -> List[Subject]: return self.class_subject_repo.get_all_subjects()
    def get_subject_by_id(self, subject_id: str) -> Optional[Subject]: return self.class_subject_repo.get_subject_by_id(subject_id)
    def get_subject_by_name_and_class(self, name: str, class_id: str) -> Optional[Subject]: return self.class_subject_repo.get_subject_by_name_and_class(name, class_id)
    def add_subject(self, record: Dict) -> Subject: return self.class_subject_repo.add_subject(record)
    def get_subjects_by_class_id(self, class_id: str) -> List[Subject]: return self.class_subject_repo.get_subjects_by_class_id(class_id)
    def get_subjects_for_teacher_in_class(self, class_id: str, teacher_id: str) -> List[Subject]: return self.class_subject_repo.get_subjects_for_teacher_in_class(class_id, teacher_id)

    # --- MATERIAL METHODS (DELEGATED) ---
    def add_material(self, record: Dict) -> Material: return self.material_repo.add_material(record)
    def get_material_by_id(self, material_id: str) -> Optional[Material]: return self.material_repo.get_material_by_id(material_id)
    def get_materials_by_subject_id(self, subject_id: str) -> List[Material]: return self.material_repo.get_materials_by_subject_id(subject_id)

    # --- COMMUNICATION & OUTBOX METHODS (DELEGATED) ---
    def add_communication(self, record: Dict) -> Communication: return self.communication_repo.add_communication(record)
    def add_communications(self, records: List[Dict]) -> List[Communication]: return self.communication_repo.add_communications(records)
    def get_communication_by_id(self, communication_id: str) -> Optional[Communication]: return self.communication_repo.get_communication_by_id(communication_id)
    def get_communications_for_recipient(self, recipient_id: str) -> List[Communication]: return self.communication_repo.get_communications_for_recipient(recipient_id)
    def count_unread_for_recipient(self, recipient_id: str) -> int: return self.communication_repo.count_unread_for_recipient(recipient_id)
    def get_subject_communications_for_recipient(self, subject_id: str, recipient_id: str) -> List[Communication]: return self.communication_repo.get_subject_communications_for_recipient(subject_id, recipient_id)
    def get_conversation(self, user_id: str, other_id: str) -> List[Communication]: return self.communication_repo.get_conversation(user_id, other_id)
    def get_communications_involving(self, user_id: str) -> List[Communication]: return self.communication_repo.get_communications_involving(user_id)
    def add_outbox_entry(self, record: Dict) -> NotificationOutbox: return self.communication_repo.add_outbox_entry(record)
    def get_outbox_entry(self, entry_id: str) -> Optional[NotificationOutbox]: return self.communication_repo.get_outbox_entry(entry_id)
    def get_pending_outbox_entries(self) -> List[NotificationOutbox]: return self.communication_repo.get_pending_outbox_entries()
    def claim_outbox_entry(self, entry_id: str, delivered_at: datetime) -> bool: return self.communication_repo.claim_outbox_entry(entry_id, delivered_at)


def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a DatabaseService bound to the request's session."""
    yield DatabaseService(db_session=db)
