from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hospital_billing.database import get_db
from hospital_billing.schemas import AuditLogOut
from hospital_billing.services.audit import recent_entries

router = APIRouter(prefix="/api/audit", tags=["Audit"])


@router.get("", response_model=List[AuditLogOut])
async def list_audit_entries(
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Newest changes first."""
    return recent_entries(db, limit)
