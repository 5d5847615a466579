# Importing every model module here lets string-based relationships
# ("User", "Subject", ...) resolve no matter which model is touched first.
from . import user_model, class_subject_models, material_models, communication_models  # noqa: F401
