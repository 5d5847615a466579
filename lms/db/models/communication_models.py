# /lms/db/models/communication_models.py

"""
This module defines the SQLAlchemy ORM models for messages between accounts
and for the outbox that drives notification fan-out.
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..base_class import Base
from .user_model import _utcnow
from ...models.enums import CommunicationStatus, OutboxStatus


class Communication(Base):
    """
    A single message: a student query, a teacher reply, or a notification
    produced by fan-out. Replies point at the message they answer through
    `parent_id`, forming a thread. The only mutation is unread -> read.
    """
    id = Column(String, primary_key=True, index=True)
    sender_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    class_id = Column(String, ForeignKey("classes.id"), nullable=True)
    subject_id = Column(String, ForeignKey("subjects.id"), nullable=True, index=True)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=False, default=CommunicationStatus.UNREAD.value)
    parent_id = Column(String, ForeignKey("communications.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
    subject = relationship("Subject")
    class_ = relationship("Class")
    parent = relationship("Communication", remote_side=[id])


class NotificationOutbox(Base):
    """
    A pending unit of fan-out work. Written in the same transaction as the
    material that triggers it and flipped to `delivered` in the same
    transaction that inserts the notifications.
    """
    __tablename__ = "notification_outbox"

    id = Column(String, primary_key=True, index=True)
    event = Column(String, nullable=False)
    material_id = Column(String, ForeignKey("materials.id"), nullable=False, index=True)
    status = Column(String, index=True, nullable=False, default=OutboxStatus.PENDING.value)
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    material = relationship("Material")
