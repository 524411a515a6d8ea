# backend/config.py
from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    APP_NAME: str = "Duck Farm API"
    VERSION: str = "1.0.0"

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./duck_farm.db"

    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: Optional[str] = None

    # Bootstrap administrator, created at startup when the users table is empty
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_NAME: str = "Administrator"

    # Business rules
    DISCOUNT_RATE: Decimal = Decimal("0.20")
    REPORT_DEFAULT_DAYS: int = 30

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
