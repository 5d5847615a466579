# /lms/db/models/user_model.py

"""
This module defines the SQLAlchemy ORM model for an account. Admins, teachers
and students share one table and are told apart by `role`.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..base_class import Base
from ...models.enums import ApprovalStatus, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    SQLAlchemy model representing an account.

    Students carry a `roll_no` and a `class_id` and start out `pending`;
    admins and teachers are created `approved`. Accounts are never deleted, so
    every reference held by classes, subjects, materials and communications
    stays resolvable.
    """
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    contact_no = Column(String, nullable=False)
    profile_pic = Column(String, nullable=True)
    role = Column(String, index=True, nullable=False, default=Role.STUDENT.value)
    status = Column(String, index=True, nullable=False, default=ApprovalStatus.PENDING.value)

    # Student-only fields.
    roll_no = Column(String, nullable=True)
    class_id = Column(String, ForeignKey("classes.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    class_ = relationship("Class", foreign_keys=[class_id])

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED.value

    @property
    def class_name(self):
        return self.class_.name if self.class_ is not None else None
