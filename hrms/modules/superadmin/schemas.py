# hrms/modules/superadmin/schemas.py
from pydantic import AliasChoices, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from hrms.core.enums import OfflinePaymentStatus, OrderStatus
from hrms.shared.schemas.common import CamelModel


# =====================================================
# APPROVAL QUEUES
# =====================================================

class OrderResponse(CamelModel):
    id: str
    company_id: str
    company_name: Optional[str] = None
    plan_id: str
    amount: int
    currency: str
    status: OrderStatus
    payment_provider: Optional[str] = None
    payment_intent_id: Optional[str] = None
    # ORM attribute is payment_metadata; "metadata" on a declarative class is the MetaData
    payment_metadata: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("payment_metadata", "metadata"),
        serialization_alias="metadata"
    )
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class OfflineRequestResponse(CamelModel):
    id: str
    company_id: str
    company_name: Optional[str] = None
    plan_id: str
    amount: int
    requested_by: str
    notes: Optional[str] = None
    attachment_urls: Optional[List[str]] = None
    status: OfflinePaymentStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class SubdomainRequestResponse(CamelModel):
    company_id: str
    company_name: str
    subdomain: Optional[str] = None
    status: Optional[str] = None
    requested_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


# =====================================================
# METRICS / AUDIT
# =====================================================

class PlatformStats(CamelModel):
    total_companies: int
    active_companies: int
    pending_companies: int
    rejected_companies: int
    suspended_companies: int
    total_users: int
    pending_orders: int
    pending_offline_requests: int
    pending_subdomain_requests: int
    pending_approvals: int
    monthly_revenue: int


class AuditLogResponse(CamelModel):
    id: str
    user_id: Optional[str] = None
    company_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
