# hrms/modules/superadmin/router.py
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from hrms.config.database import get_db
from hrms.core.auth.dependencies import CurrentUser, require_super_admin
from hrms.core.enums import OfflinePaymentStatus, OrderStatus, SubdomainStatus
from hrms.shared.schemas.common import ReasonRequest
from .service import SuperadminService
from .schemas import (
    AuditLogResponse, OfflineRequestResponse, OrderResponse,
    PlatformStats, SubdomainRequestResponse
)

router = APIRouter()


# =====================================================
# ORDERS - ONLINE PAYMENTS
# =====================================================

@router.get("/orders", response_model=List[OrderResponse])
def get_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.get_orders(status.value if status else None, skip, limit)


@router.post("/orders/{order_id}/approve", response_model=OrderResponse)
def approve_order(
    order_id: str = Path(..., description="Order ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    **Approve an online payment**

    The order becomes `completed` and its company `active`, together.
    409 with `currentStatus` if the order was already decided.
    """
    service = SuperadminService(db)
    return service.approve_order(order_id, current_user.id)


@router.post("/orders/{order_id}/reject", response_model=OrderResponse)
def reject_order(
    request: Optional[ReasonRequest] = None,
    order_id: str = Path(..., description="Order ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Reject an online payment; `reason` is required. The company becomes `rejected`."""
    service = SuperadminService(db)
    return service.reject_order(order_id, request.reason if request else None, current_user.id)


# =====================================================
# OFFLINE PAYMENT REQUESTS
# =====================================================

@router.get("/offline-requests", response_model=List[OfflineRequestResponse])
def get_offline_requests(
    status: Optional[OfflinePaymentStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.get_offline_requests(status.value if status else None, skip, limit)


@router.post("/offline-requests/{request_id}/approve", response_model=OfflineRequestResponse)
def approve_offline_request(
    request_id: str = Path(..., description="Offline payment request ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Confirm an offline payment was received; activates the company"""
    service = SuperadminService(db)
    return service.approve_offline_request(request_id, current_user.id)


@router.post("/offline-requests/{request_id}/reject", response_model=OfflineRequestResponse)
def reject_offline_request(
    request: Optional[ReasonRequest] = None,
    request_id: str = Path(..., description="Offline payment request ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.reject_offline_request(
        request_id, request.reason if request else None, current_user.id
    )


# =====================================================
# SUBDOMAIN REQUESTS
# =====================================================

@router.get("/admin/subdomain-requests", response_model=List[SubdomainRequestResponse])
def get_subdomain_requests(
    status: Optional[SubdomainStatus] = Query(None, description="Filter by status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.get_subdomain_requests(status.value if status else None, skip, limit)


@router.post("/admin/subdomain-requests/{company_id}/approve", response_model=SubdomainRequestResponse)
def approve_subdomain(
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.approve_subdomain(company_id, current_user.id)


@router.post("/admin/subdomain-requests/{company_id}/reject", response_model=SubdomainRequestResponse)
def reject_subdomain(
    request: Optional[ReasonRequest] = None,
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = SuperadminService(db)
    return service.reject_subdomain(
        company_id, request.reason if request else None, current_user.id
    )


# =====================================================
# METRICS / AUDIT
# =====================================================

@router.get("/superadmin/stats", response_model=PlatformStats)
def get_stats(
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    **Platform metrics**

    Company counts by status, pending approvals, users, and monthly revenue
    of active companies computed from their signup plan snapshots.
    """
    service = SuperadminService(db)
    return service.get_stats()


@router.get("/audit-logs", response_model=List[AuditLogResponse])
def get_audit_logs(
    action: Optional[str] = Query(None, description="Filter by action"),
    company_id: Optional[str] = Query(None, alias="companyId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Newest first"""
    service = SuperadminService(db)
    return service.get_audit_logs(action, company_id, user_id, skip, limit)
