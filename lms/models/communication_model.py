# /lms/models/communication_model.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import CommunicationStatus
from .user_model import UserSummary


class CommunicationDraft(BaseModel):
    """
    A communication about to be written. Built for every query, reply and
    fan-out notification so malformed records fail before any persistence.
    """
    sender_id: str = Field(..., min_length=1)
    recipient_id: Optional[str] = None
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    message: str
    parent_id: Optional[str] = None

    @model_validator(mode="after")
    def check_addressing(self):
        if not self.message or not self.message.strip():
            raise ValueError("Please provide a message")
        if not self.recipient_id and not self.class_id:
            raise ValueError("Either recipient or class must be provided")
        return self


class MessageCreate(BaseModel):
    message: str


class SubjectRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class Communication(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    recipient_id: Optional[str] = None
    class_id: Optional[str] = None
    subject_id: Optional[str] = None
    message: str
    status: CommunicationStatus
    parent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    sender: Optional[UserSummary] = None
    subject: Optional[SubjectRef] = None


class CommunicationList(BaseModel):
    count: int
    communications: List[Communication]


class UnreadCount(BaseModel):
    unread_count: int


class RedriveResult(BaseModel):
    attempted: int
    delivered: int
    notified: int
