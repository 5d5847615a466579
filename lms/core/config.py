# /lms/core/config.py

"""
Application settings, read once from the environment at import time.

A local `.env` file is loaded first so development setups do not need to
export anything by hand.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings and configuration"""

    # App settings
    APP_NAME: str = "LMS Backend API"
    APP_VERSION: str = "1.0.0"

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lms.db")

    # Auth settings
    JWT_SECRET: str = os.getenv("JWT_SECRET", "dev-secret-key-change-me")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "30"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Blob storage settings
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    FILES_URL_PREFIX: str = os.getenv("FILES_URL_PREFIX", "/files")
    ALLOWED_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".pdf", ".mp4", ".mp3", ".doc", ".docx"]
    DEFAULT_PROFILE_PIC: str = os.getenv("DEFAULT_PROFILE_PIC", "/files/default-avatar.png")

    # First admin account, created at startup when no admin exists yet
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrator")
    ADMIN_EMAIL: Optional[str] = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")
    ADMIN_CONTACT_NO: str = os.getenv("ADMIN_CONTACT_NO", "0000000000")

    # Outbound email settings (all optional; email is skipped when unset)
    SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: Optional[str] = os.getenv("SMTP_USER")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")
    SMTP_FROM: Optional[str] = os.getenv("SMTP_FROM")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASSWORD and self.SMTP_FROM)


settings = Settings()
