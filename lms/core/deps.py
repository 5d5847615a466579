# /lms/core/deps.py

"""
FastAPI dependencies that resolve the acting account from a bearer token.

`require_roles` is the coarse, route-level precondition; the services repeat
the full check through the access-control core.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from lms.db.models.user_model import User
from lms.models.enums import Role
from lms.services.database_service import DatabaseService, get_db_service
from .errors import ForbiddenError, UnauthenticatedError
from .security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: DatabaseService = Depends(get_db_service),
) -> User:
    if not token:
        raise UnauthenticatedError("Not authorized, no token")
    user_id = decode_access_token(token)
    if not user_id:
        raise UnauthenticatedError("Not authorized, token failed")
    user = db.get_user_by_id(user_id)
    if not user:
        raise UnauthenticatedError("Unauthorized - No user found")
    return user


def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError(f"Restricted access - {current_user.role} not authorized")
        return current_user

    return dependency
