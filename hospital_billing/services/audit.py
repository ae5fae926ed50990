"""
Audit trail — one row per successful change made through the API.
Stores: what was done, to which record, when, and a short summary.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from hospital_billing.database import Base
from hospital_billing.logger import logger


class AuditLog(Base):
    """Stores a log entry for each change."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(String(30), nullable=False)
    action = Column(String(20), nullable=False)   # create / update / delete / status
    entity = Column(String(30), nullable=False)   # patient / service / invoice / settings
    entity_id = Column(String(36))
    details = Column(Text)


def log_action(
    db: Session,
    action: str,
    entity: str,
    entity_id: Optional[str],
    details: str = "",
) -> None:
    """Write an audit entry. A failure here is logged, never raised."""
    entry = AuditLog(
        timestamp=datetime.now().isoformat(),
        action=action,
        entity=entity,
        entity_id=entity_id,
        details=details[:500] if details else "",
    )

    try:
        db.add(entry)
        db.commit()
        logger.info(f"📋 Audit: {action} {entity} {entity_id or ''}".rstrip())
    except SQLAlchemyError as e:
        logger.error(f"❌ Audit log failed: {e}")
        db.rollback()


def recent_entries(db: Session, limit: int = 100) -> List[AuditLog]:
    return db.query(AuditLog).order_by(AuditLog.id.desc()).limit(limit).all()
