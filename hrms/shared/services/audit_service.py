# hrms/shared/services/audit_service.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hrms.core.enums import AuditAction
from hrms.shared.database.models import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only audit trail. Entries join the caller's transaction."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        company_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditLog:
        entry = AuditLog(
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            company_id=company_id,
            details=details or {},
        )
        self.db.add(entry)
        logger.info(f"audit {action.value} {entity_type}:{entity_id} by {user_id}")
        return entry

    def list_entries(
        self,
        action: Optional[str] = None,
        company_id: Optional[str] = None,
        user_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[AuditLog]:
        query = self.db.query(AuditLog)

        if action:
            query = query.filter(AuditLog.action == action)
        if company_id:
            query = query.filter(AuditLog.company_id == company_id)
        if user_id:
            query = query.filter(AuditLog.user_id == user_id)

        return query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit).all()
