# /lms/routers/auth_router.py

"""
Public authentication endpoints: student self-registration, login (JSON and
OAuth2 form flavours) and the current account's profile.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.security import OAuth2PasswordRequestForm

from lms.core.deps import get_current_user
from lms.core.errors import validate_or_fail
from lms.db.models.user_model import User as UserModel
from lms.models.user_model import AuthResponse, LoginRequest, User, UserCreate
from lms.services import user_service
from lms.services.database_service import DatabaseService, get_db_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, summary="Register a Student Account")
def register_user(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    contact_no: str = Form(...),
    roll_no: str = Form(...),
    class_id: str = Form(...),
    profile_pic: Optional[UploadFile] = File(None),
    db: DatabaseService = Depends(get_db_service),
):
    """Creates a pending student account with an optional profile picture."""
    user_in = validate_or_fail(
        UserCreate, name=name, email=email, password=password,
        contact_no=contact_no, roll_no=roll_no, class_id=class_id,
    )
    return user_service.register_student(db=db, user_in=user_in, profile_pic=profile_pic)


@router.post("/login", response_model=AuthResponse, summary="Log In with Email and Password")
def login(credentials: LoginRequest, db: DatabaseService = Depends(get_db_service)):
    return user_service.authenticate(db=db, email=credentials.email, password=credentials.password)


@router.post("/token", response_model=AuthResponse, summary="OAuth2 Password Flow Login")
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: DatabaseService = Depends(get_db_service),
):
    """Same as /login, but accepts the OAuth2 form so the docs UI can authorize."""
    return user_service.authenticate(db=db, email=form_data.username, password=form_data.password)


@router.get("/me", response_model=User, summary="Get the Current Account")
def read_current_user(current_user: UserModel = Depends(get_current_user)):
    return user_service.get_profile(current_user)
