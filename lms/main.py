# /lms/main.py

import logging
from contextlib import asynccontextmanager
from pathlib import Path

# --- Core FastAPI Imports ---
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from .core.config import settings
from .core.errors import DependencyFailedError, LMSError, ValidationFailedError
from .core.logging import setup_logging
from .db.database import SessionLocal, init_db

# --- Application-specific Router Imports ---
from .routers import (
    admin_router,
    auth_router,
    communication_router,
    material_router,
    student_router,
    teacher_router,
)

# --- Service Imports for Startup Logic ---
from .services import notification_service, user_service
from .services.database_service import DatabaseService

logger = logging.getLogger(__name__)


def _run_startup_tasks() -> None:
    """Creates the first admin if configured and retries fan-outs left pending by a previous run."""
    session = SessionLocal()
    try:
        db = DatabaseService(session)
        user_service.ensure_bootstrap_admin(db)
        notification_service.redrive_pending_notifications(db)
    except (LMSError, SQLAlchemyError) as e:
        logger.error(f"Startup task failed: {e}")
    finally:
        session.close()


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # This code runs ONCE when the application starts up.
    setup_logging(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)
    init_db()
    _run_startup_tasks()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    # This code runs ONCE when the application shuts down.


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title=settings.APP_NAME,
    description="Classes, subjects, course materials and teacher-student messaging.",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error Handling ---
@app.exception_handler(LMSError)
async def lms_error_handler(request: Request, exc: LMSError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.kind.value}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies and forms get the same envelope as service-level validation.
    problems = "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())
    error = ValidationFailedError(problems or "Invalid request")
    logger.warning(f"{request.method} {request.url.path} -> 422 validation_failed: {error.message}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    # Reads outside DatabaseService.transaction() are not mapped by the services.
    logger.error(f"{request.method} {request.url.path} -> store error", exc_info=exc)
    error = DependencyFailedError(f"Database operation failed: {exc.__class__.__name__}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# --- Uploaded Files ---
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.FILES_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="files")

# --- API Router Inclusion ---
app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["Admin"])
app.include_router(teacher_router.router, prefix="/api/teachers", tags=["Teachers"])
app.include_router(student_router.router, prefix="/api/students", tags=["Students"])
app.include_router(material_router.router, prefix="/api/materials", tags=["Materials"])
app.include_router(communication_router.router, prefix="/api/communications", tags=["Communications"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "LMS Backend is running!", "version": app.version}
