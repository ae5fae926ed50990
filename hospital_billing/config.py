import os
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    APP_NAME: str = os.getenv("APP_NAME", "Hospital Billing")

    # Database
    # A sqlite file is the embedded (desktop) deployment; point this at
    # postgresql://... for a networked server install.
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'hospital_billing.db'}"
    DATABASE_ECHO: bool = False

    # Seeding
    SEED_DEMO_DATA: bool = True
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # Billing
    DEFAULT_TAX_RATE: str = "0"
    DEFAULT_CURRENCY: str = "INR"
    INVOICE_PREFIX: str = "INV"
    INVOICE_DUE_DAYS: int = 30

    # HTTP
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Paths
    FRONTEND_DIR: str = str(BASE_DIR / "frontend")

    class Config:
        env_file = ".env"


settings = Settings()
