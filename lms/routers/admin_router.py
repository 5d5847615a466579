# /lms/routers/admin_router.py

from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from lms.core.deps import require_roles
from lms.db.models.user_model import User as UserModel
from lms.models import class_model, user_model
from lms.models.communication_model import RedriveResult
from lms.models.enums import Role
from lms.services import export_service, notification_service, organization_service, user_service
from lms.services.access_control import Action, decide
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()

admin_only = require_roles(Role.ADMIN)


# --- TEACHER ACCOUNTS ---

@router.post("/teachers", response_model=user_model.User, status_code=status.HTTP_201_CREATED, summary="Add a Teacher")
def add_teacher(
    teacher_in: user_model.TeacherCreate,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(admin_only),
):
    return user_service.create_teacher(db=db, actor=actor, teacher_in=teacher_in)


@router.get("/teachers", response_model=List[user_model.User], summary="List All Teachers")
def get_all_teachers(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    return user_service.list_accounts(db=db, actor=actor, role=Role.TEACHER)


@router.get("/students", response_model=List[user_model.User], summary="List All Students")
def get_all_students(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    return user_service.list_accounts(db=db, actor=actor, role=Role.STUDENT)


# --- CLASSES & SUBJECTS ---

@router.post("/classes", response_model=class_model.Class, status_code=status.HTTP_201_CREATED, summary="Create a Class")
def create_class(
    class_in: class_model.ClassCreate,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(admin_only),
):
    return organization_service.create_class(db=db, actor=actor, class_in=class_in)


@router.get("/classes", response_model=List[class_model.ClassDetails], summary="List Classes with Teachers and Subjects")
def get_all_classes(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    return organization_service.get_all_classes_with_subjects(db=db, actor=actor)


@router.put("/classes/{class_id}/assign-teacher", response_model=class_model.Class, summary="Assign a Teacher to a Class")
def assign_teacher(
    class_id: str,
    payload: class_model.AssignTeacherRequest,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(admin_only),
):
    return organization_service.assign_teacher_to_class(db=db, actor=actor, class_id=class_id, teacher_id=payload.teacher_id)


@router.get("/classes/{class_id}/subjects", response_model=class_model.StudentSubjects, summary="List a Class's Subjects")
def get_class_subjects(class_id: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    return organization_service.get_class_subjects(db=db, actor=actor, class_id=class_id)


@router.post("/subjects", response_model=class_model.Subject, status_code=status.HTTP_201_CREATED, summary="Create a Subject")
def create_subject(
    subject_in: class_model.SubjectCreate,
    db: DatabaseService = Depends(get_db_service),
    actor: UserModel = Depends(admin_only),
):
    return organization_service.create_subject(db=db, actor=actor, subject_in=subject_in)


# --- REPORTS & MAINTENANCE ---

@router.get("/records/{collection}", summary="Export Records as CSV", response_class=StreamingResponse)
def export_records(collection: str, db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    """Downloads teachers, students, classes or subjects as a CSV file."""
    decide(actor, Action.EXPORT_RECORDS).enforce()
    csv_string = export_service.export_records_as_csv(collection=collection, db=db)
    file_name = f"lms_{collection}.csv"
    return StreamingResponse(iter([csv_string]), media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={file_name}"})


@router.post("/notifications/redrive", response_model=RedriveResult, summary="Retry Pending Notification Fan-Outs")
def redrive_notifications(db: DatabaseService = Depends(get_db_service), actor: UserModel = Depends(admin_only)):
    decide(actor, Action.REDRIVE_NOTIFICATIONS).enforce()
    return notification_service.redrive_pending_notifications(db=db)
