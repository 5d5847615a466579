# /lms/routers/teacher_router.py

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status

from lms.core.deps import require_roles
from lms.db.models.user_model import User as UserModel
from lms.models import class_model, communication_model, material_model, user_model
from lms.models.enums import ApprovalStatus, Role
from lms.services import email_service, material_service, notification_service, organization_service, user_service
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()

staff = require_roles(Role.TEACHER, Role.ADMIN)


# --- CLASSES & STUDENTS ---

@router.get("/classes", response_model=List[class_model.ClassDetails], summary="List the Teacher's Classes")
def get_teacher_classes(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(staff)):
    return organization_service.get_teacher_classes(db=db, actor=actor)


@router.get("/students/pending", response_model=List[user_model.User], summary="List Pending Students")
def get_pending_students(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(staff)):
    return user_service.list_pending_students(db=db, actor=actor)


@router.put("/students/{student_id}/status", response_model=user_model.User, summary="Approve or Reject a Student")
def update_student_status(
    student_id: str,
    payload: user_model.StudentStatusUpdate,
    background_tasks: BackgroundTasks,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(staff),
):
    student = user_service.review_student(db=db, actor=actor, student_id=student_id, status=payload.status)
    if payload.status == ApprovalStatus.APPROVED:
        background_tasks.add_task(email_service.send_approval_email, student.email, student.name)
    return student


# --- SUBJECTS ---

@router.get("/subjects/{subject_id}/students", response_model=class_model.SubjectStudents, summary="List Students of a Subject")
def get_subject_students(subject_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(staff)):
    return organization_service.get_subject_students(db=db, actor=actor, subject_id=subject_id)


@router.get("/subjects/{subject_id}/communications", response_model=communication_model.CommunicationList, summary="List Student Queries for a Subject")
def get_subject_communications(subject_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(staff)):
    communications = notification_service.get_subject_communications(db=db, actor=actor, subject_id=subject_id)
    return {"count": len(communications), "communications": communications}


# --- MATERIALS ---

@router.post("/materials", response_model=material_model.MaterialUploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload a Material")
def upload_material(
    background_tasks: BackgroundTasks,
    title: str = Form(...),
    material_type: str = Form(..., alias="type"),
    subject_id: str = Form(...),
    description: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(staff),
):
    """
    Uploads a file for an owned subject and notifies every approved student
    of the class. A 503 response means the material was saved but the
    notifications were queued for retry instead of delivered.
    """
    outcome = material_service.upload_material(
        db=db, actor=actor, file=file, title=title, material_type=material_type,
        subject_id=subject_id, description=description,
    )
    if outcome.recipients:
        background_tasks.add_task(
            email_service.send_material_notification,
            outcome.recipients, outcome.material.type, outcome.material.title, outcome.subject_name,
        )
    return {
        "material": outcome.material,
        "notified": outcome.notified,
        "message": "Material uploaded successfully and students notified",
    }


# --- COMMUNICATION ---

@router.post("/communications/{communication_id}/reply", response_model=communication_model.Communication, status_code=status.HTTP_201_CREATED, summary="Reply to a Student Query")
def reply_to_communication(
    communication_id: str,
    payload: communication_model.MessageCreate,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(staff),
):
    return notification_service.reply(db=db, actor=actor, communication_id=communication_id, message=payload.message)
