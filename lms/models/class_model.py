# /lms/models/class_model.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .user_model import User, UserSummary


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Unique name of the class.")
    description: Optional[str] = None


class AssignTeacherRequest(BaseModel):
    teacher_id: str


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    class_id: str
    teacher_id: str


class Subject(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    class_id: str
    teacher_id: str
    teacher: Optional[UserSummary] = None
    created_at: Optional[datetime] = None


class Class(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    teachers: List[UserSummary] = []
    created_at: Optional[datetime] = None


class ClassDetails(Class):
    """A class together with its subjects, as listed for admins and teachers."""
    subjects: List[Subject] = []


class StudentSubjects(BaseModel):
    class_name: str
    count: int
    subjects: List[Subject]


class SubjectStudents(BaseModel):
    subject: str
    count: int
    students: List[User]
