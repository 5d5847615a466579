# /lms/models/material_model.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import MaterialType
from .user_model import UserSummary


class MaterialCreate(BaseModel):
    """Form fields of a material upload, validated before anything is stored."""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: MaterialType
    subject_id: str = Field(..., min_length=1)


class Material(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    type: MaterialType
    file_url: str
    subject_id: str
    created_by: str
    uploader: Optional[UserSummary] = None
    created_at: Optional[datetime] = None


class MaterialUploadResponse(BaseModel):
    success: bool = True
    material: Material
    notified: int
    message: str


class SubjectMaterials(BaseModel):
    subject_name: str
    count: int
    materials: List[Material]
