# /lms/db/base.py

# Central registry for all SQLAlchemy models. Importing them here guarantees
# that `Base.metadata` knows every table when `create_all` or Alembic's
# autogenerate scans it.

from .base_class import Base

from .models.user_model import User
from .models.class_subject_models import Class, Subject, class_teachers
from .models.material_models import Material
from .models.communication_models import Communication, NotificationOutbox
