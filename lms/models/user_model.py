# /lms/models/user_model.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .enums import ApprovalStatus, Role


class _NormalizedEmail(BaseModel):
    """Emails are compared case-insensitively, so they are stored lower-cased."""
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class AccountBase(_NormalizedEmail):
    name: str = Field(..., min_length=1)
    contact_no: str = Field(..., min_length=1)


class UserCreate(AccountBase):
    """
    Public registration payload. Self-registration always creates a student
    account, which stays pending until a teacher of its class approves it.
    """
    password: str = Field(..., min_length=6)
    roll_no: str = Field(..., min_length=1)
    class_id: str = Field(..., min_length=1)


class TeacherCreate(AccountBase):
    """Payload an admin sends to create a teacher account."""
    password: str = Field(..., min_length=6)


class LoginRequest(_NormalizedEmail):
    password: str


class User(BaseModel):
    """The public representation of an account. Never includes the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    contact_no: str
    role: Role
    status: ApprovalStatus
    profile_pic: Optional[str] = None
    roll_no: Optional[str] = None
    class_id: Optional[str] = None
    class_name: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role
    profile_pic: Optional[str] = None


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User


class StudentStatusUpdate(BaseModel):
    status: ApprovalStatus

    @field_validator("status")
    @classmethod
    def only_decisions(cls, value: ApprovalStatus) -> ApprovalStatus:
        if value == ApprovalStatus.PENDING:
            raise ValueError("Status must be either approved or rejected")
        return value
