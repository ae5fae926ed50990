from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hospital_billing.config import Settings
from hospital_billing.database import get_db
from hospital_billing.services.storage import DatabaseStorage


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    """FastAPI dependency that wraps the request's session in the storage contract."""
    return DatabaseStorage(db)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
