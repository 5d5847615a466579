# /lms/models/enums.py

"""
Closed value sets shared by the ORM models, the pydantic contracts and the
access-control core. Stored in the database as their string values.
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MaterialType(str, Enum):
    NOTES = "notes"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class CommunicationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


class OutboxStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"


class OutboxEvent(str, Enum):
    MATERIAL_UPLOADED = "material_uploaded"
