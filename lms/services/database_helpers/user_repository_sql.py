# /lms/services/database_helpers/user_repository_sql.py

"""
Raw SQLAlchemy queries for the `users` table. Writes only stage changes on
the session; the `DatabaseService` transaction decides when they commit.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from lms.db.models.user_model import User
from lms.models.enums import ApprovalStatus, Role


class UserRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_id_and_role(self, user_id: str, role: Role) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id, User.role == role.value).first()

    def add_user(self, record: Dict) -> User:
        new_user = User(**record)
        self.db.add(new_user)
        self.db.flush()
        return new_user

    def get_users_by_role(self, role: Role) -> List[User]:
        return self.db.query(User).filter(User.role == role.value).order_by(User.created_at.asc()).all()

    def get_roster(self, class_id: str) -> List[User]:
        """
        Approved students of a class in roster order (oldest account first).
        This is the recipient set of a material fan-out.
        """
        return (
            self.db.query(User)
            .filter(
                User.role == Role.STUDENT.value,
                User.status == ApprovalStatus.APPROVED.value,
                User.class_id == class_id,
            )
            .order_by(User.created_at.asc(), User.id.asc())
            .all()
        )

    def get_pending_students(self, class_ids: Sequence[str]) -> List[User]:
        if not class_ids:
            return []
        return (
            self.db.query(User)
            .filter(
                User.role == Role.STUDENT.value,
                User.status == ApprovalStatus.PENDING.value,
                User.class_id.in_(list(class_ids)),
            )
            .order_by(User.created_at.asc())
            .all()
        )
