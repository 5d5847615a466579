# /lms/services/database_helpers/class_subject_repository_sql.py

"""
Raw SQLAlchemy queries for the `classes`, `class_teachers` and `subjects`
tables.
"""

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from lms.db.models.class_subject_models import Class, Subject, class_teachers
from lms.db.models.user_model import User


class ClassSubjectRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Class Methods ---

    def get_all_classes(self) -> List[Class]:
        return self.db.query(Class).order_by(Class.created_at.asc()).all()

    def get_class_by_id(self, class_id: str) -> Optional[Class]:
        return self.db.query(Class).filter(Class.id == class_id).first()

    def get_class_by_name(self, name: str) -> Optional[Class]:
        return self.db.query(Class).filter(Class.name == name).first()

    def add_class(self, record: Dict) -> Class:
        new_class = Class(**record)
        self.db.add(new_class)
        self.db.flush()
        return new_class

    def add_teacher_to_class(self, class_obj: Class, teacher: User) -> Class:
        class_obj.teachers.append(teacher)
        self.db.flush()
        return class_obj

    def get_classes_for_teacher(self, teacher_id: str) -> List[Class]:
        """Classes the teacher is attached to through `class_teachers`."""
        return (
            self.db.query(Class)
            .join(class_teachers, class_teachers.c.class_id == Class.id)
            .filter(class_teachers.c.teacher_id == teacher_id)
            .order_by(Class.created_at.asc())
            .all()
        )

    # --- Subject Methods ---

    def get_all_subjects(self) -> List[Subject]:
        return self.db.query(Subject).order_by(Subject.created_at.asc()).all()

    def get_subject_by_id(self, subject_id: str) -> Optional[Subject]:
        return self.db.query(Subject).filter(Subject.id == subject_id).first()

    def get_subject_by_name_and_class(self, name: str, class_id: str) -> Optional[Subject]:
        return self.db.query(Subject).filter(Subject.name == name, Subject.class_id == class_id).first()

    def add_subject(self, record: Dict) -> Subject:
        new_subject = Subject(**record)
        self.db.add(new_subject)
        self.db.flush()
        return new_subject

    def get_subjects_by_class_id(self, class_id: str) -> List[Subject]:
        return self.db.query(Subject).filter(Subject.class_id == class_id).order_by(Subject.created_at.asc()).all()

    def get_subjects_for_teacher_in_class(self, class_id: str, teacher_id: str) -> List[Subject]:
        return (
            self.db.query(Subject)
            .filter(Subject.class_id == class_id, Subject.teacher_id == teacher_id)
            .order_by(Subject.created_at.asc())
            .all()
        )
