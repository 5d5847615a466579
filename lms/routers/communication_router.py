# /lms/routers/communication_router.py

from fastapi import APIRouter, Depends

from lms.core.deps import get_current_user
from lms.db.models.user_model import User as UserModel
from lms.models import communication_model
from lms.services import notification_service
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()


@router.get("/unread", response_model=communication_model.UnreadCount, summary="Count Unread Communications")
def get_unread_count(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(get_current_user)):
    return {"unread_count": notification_service.get_unread_count(db=db, actor=actor)}


@router.get("", response_model=communication_model.CommunicationList, summary="List Sent and Received Communications")
def get_all_communications(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(get_current_user)):
    communications = notification_service.get_all_communications(db=db, actor=actor)
    return {"count": len(communications), "communications": communications}


@router.put("/{communication_id}/read", response_model=communication_model.Communication, summary="Mark a Communication as Read")
def mark_as_read(communication_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(get_current_user)):
    return notification_service.mark_as_read(db=db, actor=actor, communication_id=communication_id)
