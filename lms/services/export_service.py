# /lms/services/export_service.py

"""
CSV snapshots of the organization for admins. Read-only: each export is a
single query plus a pandas DataFrame.
"""

from typing import Callable, Dict, List

import pandas as pd

from lms.core.errors import NotFoundError
from lms.models.enums import Role
from .database_service import DatabaseService


def _teacher_rows(db: DatabaseService) -> List[Dict]:
    return [
        {"ID": t.id, "Name": t.name, "Email": t.email, "Contact": t.contact_no, "Status": t.status}
        for t in db.get_users_by_role(Role.TEACHER)
    ]


def _student_rows(db: DatabaseService) -> List[Dict]:
    return [
        {
            "ID": s.id, "Name": s.name, "Email": s.email, "Contact": s.contact_no,
            "Roll No": s.roll_no, "Class": s.class_name or "Not Assigned", "Status": s.status,
        }
        for s in db.get_users_by_role(Role.STUDENT)
    ]


def _class_rows(db: DatabaseService) -> List[Dict]:
    return [
        {
            "ID": c.id, "Name": c.name, "Description": c.description,
            "Teachers": ", ".join(t.name for t in c.teachers),
        }
        for c in db.get_all_classes()
    ]


def _subject_rows(db: DatabaseService) -> List[Dict]:
    return [
        {
            "ID": s.id, "Name": s.name, "Description": s.description,
            "Class": s.class_.name if s.class_ else "Not Assigned",
            "Teacher": s.teacher.name if s.teacher else "Not Assigned",
        }
        for s in db.get_all_subjects()
    ]


EXPORTS: Dict[str, Callable[[DatabaseService], List[Dict]]] = {
    "teachers": _teacher_rows,
    "students": _student_rows,
    "classes": _class_rows,
    "subjects": _subject_rows,
}

COLUMNS: Dict[str, List[str]] = {
    "teachers": ["ID", "Name", "Email", "Contact", "Status"],
    "students": ["ID", "Name", "Email", "Contact", "Roll No", "Class", "Status"],
    "classes": ["ID", "Name", "Description", "Teachers"],
    "subjects": ["ID", "Name", "Description", "Class", "Teacher"],
}


def export_records_as_csv(collection: str, db: DatabaseService) -> str:
    if collection not in EXPORTS:
        raise NotFoundError(f"Unknown export '{collection}'")
    rows = EXPORTS[collection](db)
    df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=COLUMNS[collection])
    return df.to_csv(index=False)
