# /lms/db/base_class.py

from sqlalchemy.orm import declarative_base, declared_attr


class _TableNameMixin:
    # Tables default to the lowercased class name plus "s"; models override
    # `__tablename__` where that reads badly.
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower() + "s"


Base = declarative_base(cls=_TableNameMixin)
