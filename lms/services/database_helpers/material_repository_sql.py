# /lms/services/database_helpers/material_repository_sql.py

from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from lms.db.models.material_models import Material


class MaterialRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def add_material(self, record: Dict) -> Material:
        new_material = Material(**record)
        self.db.add(new_material)
        self.db.flush()
        return new_material

    def get_material_by_id(self, material_id: str) -> Optional[Material]:
        return self.db.query(Material).filter(Material.id == material_id).first()

    def get_materials_by_subject_id(self, subject_id: str) -> List[Material]:
        return (
            self.db.query(Material)
            .filter(Material.subject_id == subject_id)
            .order_by(Material.created_at.desc())
            .all()
        )
