# /lms/db/models/material_models.py

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..base_class import Base
from .user_model import _utcnow


class Material(Base):
    """
    Metadata for an uploaded course file. The file itself lives in blob
    storage; `file_url` is opaque here. Materials are never updated.
    """
    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    subject_id = Column(String, ForeignKey("subjects.id"), nullable=False, index=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    subject = relationship("Subject")
    uploader = relationship("User", foreign_keys=[created_by])
