# hrms/modules/superadmin/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Any, Dict, List, Optional

from hrms.core.enums import (
    CompanyStatus, OfflinePaymentStatus, OrderStatus, SubdomainStatus
)
from hrms.shared.database.models import Company, OfflinePaymentRequest, Order, User


class SuperadminRepository:
    """
    Approval queues and platform metrics.

    Transitions are conditional UPDATEs guarded by the expected current
    status; they return the number of rows changed so the caller can tell a
    lost race from a success. Nothing here commits.
    """

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # ORDERS
    # =====================================================

    def get_orders(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Order]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc()).offset(skip).limit(limit).all()

    def get_order_by_id(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def transition_order(self, order_id: str, from_status: str, values: Dict[str, Any]) -> int:
        return self.db.query(Order).filter(
            Order.id == order_id,
            Order.status == from_status
        ).update(values, synchronize_session=False)

    # =====================================================
    # OFFLINE PAYMENT REQUESTS
    # =====================================================

    def get_offline_requests(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[OfflinePaymentRequest]:
        query = self.db.query(OfflinePaymentRequest)
        if status:
            query = query.filter(OfflinePaymentRequest.status == status)
        return (
            query.order_by(OfflinePaymentRequest.created_at.desc())
            .offset(skip).limit(limit).all()
        )

    def get_offline_request_by_id(self, request_id: str) -> Optional[OfflinePaymentRequest]:
        return (
            self.db.query(OfflinePaymentRequest)
            .filter(OfflinePaymentRequest.id == request_id)
            .first()
        )

    def transition_offline_request(
        self,
        request_id: str,
        from_status: str,
        values: Dict[str, Any]
    ) -> int:
        return self.db.query(OfflinePaymentRequest).filter(
            OfflinePaymentRequest.id == request_id,
            OfflinePaymentRequest.status == from_status
        ).update(values, synchronize_session=False)

    # =====================================================
    # COMPANIES / SUBDOMAINS
    # =====================================================

    def get_company_by_id(self, company_id: str) -> Optional[Company]:
        return self.db.query(Company).filter(Company.id == company_id).first()

    def transition_company(self, company_id: str, from_status: str, to_status: str) -> int:
        return self.db.query(Company).filter(
            Company.id == company_id,
            Company.status == from_status
        ).update({Company.status: to_status}, synchronize_session=False)

    def get_subdomain_requests(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Company]:
        query = self.db.query(Company).filter(Company.subdomain_status.isnot(None))
        if status:
            query = query.filter(Company.subdomain_status == status)
        return (
            query.order_by(Company.subdomain_requested_at.desc())
            .offset(skip).limit(limit).all()
        )

    def transition_subdomain(
        self,
        company_id: str,
        from_status: str,
        values: Dict[str, Any]
    ) -> int:
        return self.db.query(Company).filter(
            Company.id == company_id,
            Company.subdomain_status == from_status
        ).update(values, synchronize_session=False)

    # =====================================================
    # METRICS
    # =====================================================

    def get_platform_stats(self) -> Dict[str, Any]:
        company_counts = dict(
            self.db.query(Company.status, func.count(Company.id))
            .group_by(Company.status)
            .all()
        )

        pending_orders = self.db.query(func.count(Order.id)).filter(
            Order.status == OrderStatus.PENDING.value
        ).scalar()

        pending_offline = self.db.query(func.count(OfflinePaymentRequest.id)).filter(
            OfflinePaymentRequest.status == OfflinePaymentStatus.PENDING.value
        ).scalar()

        pending_subdomains = self.db.query(func.count(Company.id)).filter(
            Company.subdomain_status == SubdomainStatus.PENDING.value
        ).scalar()

        total_users = self.db.query(func.count(User.id)).scalar()

        # Revenue follows what each tenant signed up for, not the live catalogue
        monthly_revenue = 0
        active_snapshots = self.db.query(Company.plan_snapshot).filter(
            Company.status == CompanyStatus.ACTIVE.value
        ).all()
        for (snapshot,) in active_snapshots:
            snapshot = snapshot or {}
            duration = snapshot.get("duration") or 1
            monthly_revenue += (snapshot.get("price") or 0) // duration

        return {
            "total_companies": sum(company_counts.values()),
            "active_companies": company_counts.get(CompanyStatus.ACTIVE.value, 0),
            "pending_companies": company_counts.get(CompanyStatus.PENDING.value, 0),
            "rejected_companies": company_counts.get(CompanyStatus.REJECTED.value, 0),
            "suspended_companies": company_counts.get(CompanyStatus.SUSPENDED.value, 0),
            "total_users": total_users or 0,
            "pending_orders": pending_orders or 0,
            "pending_offline_requests": pending_offline or 0,
            "pending_subdomain_requests": pending_subdomains or 0,
            "pending_approvals": (pending_orders or 0) + (pending_offline or 0) + (pending_subdomains or 0),
            "monthly_revenue": monthly_revenue,
        }
