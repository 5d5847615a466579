# /lms/routers/student_router.py

from fastapi import APIRouter, Depends, status

from lms.core.deps import require_roles
from lms.db.models.user_model import User as UserModel
from lms.models import class_model, communication_model, material_model
from lms.models.enums import Role
from lms.services import material_service, notification_service, organization_service
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()

student_only = require_roles(Role.STUDENT)


@router.get("/subjects", response_model=class_model.StudentSubjects, summary="List the Student's Class Subjects")
def get_student_subjects(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(student_only)):
    return organization_service.get_class_subjects(db=db, actor=actor)


@router.get("/subjects/{subject_id}/materials", response_model=material_model.SubjectMaterials, summary="List Materials of a Subject")
def get_subject_materials(subject_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(student_only)):
    return material_service.get_subject_materials(db=db, actor=actor, subject_id=subject_id)


@router.post("/subjects/{subject_id}/query", response_model=communication_model.Communication, status_code=status.HTTP_201_CREATED, summary="Send a Query to the Subject's Teacher")
def send_query_to_teacher(
    subject_id: str,
    payload: communication_model.MessageCreate,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(student_only),
):
    return notification_service.send_query(db=db, actor=actor, subject_id=subject_id, message=payload.message)


@router.get("/notifications", response_model=communication_model.CommunicationList, summary="List Notifications")
def get_notifications(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(student_only)):
    notifications = notification_service.get_notifications(db=db, actor=actor)
    return {"count": len(notifications), "communications": notifications}


@router.put("/notifications/{notification_id}", response_model=communication_model.Communication, summary="Mark a Notification as Read")
def mark_notification_as_read(notification_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(student_only)):
    return notification_service.mark_as_read(db=db, actor=actor, communication_id=notification_id)


@router.get("/communications/{teacher_id}", response_model=communication_model.CommunicationList, summary="Conversation with a Teacher")
def get_communication_with_teacher(teacher_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(student_only)):
    communications = notification_service.get_conversation_with_teacher(db=db, actor=actor, teacher_id=teacher_id)
    return {"count": len(communications), "communications": communications}
