# /lms/routers/material_router.py

from fastapi import APIRouter, Depends

from lms.core.deps import get_current_user
from lms.db.models.user_model import User as UserModel
from lms.models import material_model
from lms.services import material_service
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()


@router.get("/{material_id}", response_model=material_model.Material, summary="Get a Single Material")
def get_material(material_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(get_current_user)):
    """Open to every role; students must be in the subject's class, teachers must own the subject."""
    return material_service.get_material(db=db, actor=actor, material_id=material_id)
