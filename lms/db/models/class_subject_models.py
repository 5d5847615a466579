# /lms/db/models/class_subject_models.py

"""
This module defines the SQLAlchemy ORM models for the `Class` and `Subject`
entities and the `class_teachers` edge that records which teachers are
assigned to which class.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from ..base_class import Base
from .user_model import _utcnow

# The composite primary key is what keeps a teacher from being listed twice
# on the same class.
class_teachers = Table(
    "class_teachers",
    Base.metadata,
    Column("class_id", String, ForeignKey("classes.id"), primary_key=True),
    Column("teacher_id", String, ForeignKey("users.id"), primary_key=True),
)


class Class(Base):
    """
    SQLAlchemy model representing a class (a cohort of students).

    Teachers are attached explicitly by an admin or implicitly when an admin
    creates a subject in this class for a teacher who is not attached yet.
    """
    __tablename__ = "classes"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    teachers = relationship("User", secondary=class_teachers, lazy="selectin")
    subjects = relationship("Subject", back_populates="class_", order_by="Subject.created_at")

    def has_teacher(self, teacher_id: str) -> bool:
        return any(t.id == teacher_id for t in self.teachers)


class Subject(Base):
    """
    SQLAlchemy model representing a subject taught in one class by exactly one
    teacher. The teacher is fixed when the subject is created.
    """
    __table_args__ = (UniqueConstraint("name", "class_id", name="uq_subject_name_class"),)

    id = Column(String, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    class_id = Column(String, ForeignKey("classes.id"), nullable=False, index=True)
    teacher_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    class_ = relationship("Class", back_populates="subjects")
    teacher = relationship("User", foreign_keys=[teacher_id])
