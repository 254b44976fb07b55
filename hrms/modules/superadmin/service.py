# hrms/modules/superadmin/service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hrms.core.enums import (
    AuditAction, CompanyStatus, OfflinePaymentStatus, OrderStatus, SubdomainStatus
)
from hrms.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from hrms.shared.database.models import Company, OfflinePaymentRequest, Order
from hrms.shared.services.audit_service import AuditService
from .repository import SuperadminRepository
from .schemas import (
    AuditLogResponse, OfflineRequestResponse, OrderResponse,
    PlatformStats, SubdomainRequestResponse
)

logger = logging.getLogger(__name__)


def require_reason(reason: Optional[str]) -> str:
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required")
    return reason.strip()


class SuperadminService:
    """
    Super-admin console: payment and subdomain approvals, stats, audit trail.

    Every decision is a compare-and-set from `pending`, so two reviewers
    acting on the same request cannot both succeed. The request, its
    company and the audit entry are committed together.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = SuperadminRepository(db)
        self.audit = AuditService(db)

    # =====================================================
    # ORDERS
    # =====================================================

    def get_orders(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[OrderResponse]:
        return [self._order_response(o) for o in self.repository.get_orders(status, skip, limit)]

    def approve_order(self, order_id: str, approved_by: str) -> OrderResponse:
        order = self._get_order(order_id)
        self._decide(
            transition=lambda values: self.repository.transition_order(
                order.id, OrderStatus.PENDING.value, values
            ),
            values={
                Order.status: OrderStatus.COMPLETED.value,
                Order.reviewed_by: approved_by,
                Order.reviewed_at: datetime.utcnow(),
            },
            current_status=order.status,
            company_id=order.company_id,
            company_status=CompanyStatus.ACTIVE,
            strict_company=True,
        )
        self.audit.record(
            AuditAction.ORDER_APPROVED, "order", order.id,
            user_id=approved_by, company_id=order.company_id,
            details={"amount": order.amount}
        )
        self._commit()
        logger.info(f"Order {order.id} approved by {approved_by}")
        return self._order_response(self._refreshed(order))

    def reject_order(self, order_id: str, reason: Optional[str], rejected_by: str) -> OrderResponse:
        reason = require_reason(reason)
        order = self._get_order(order_id)
        self._decide(
            transition=lambda values: self.repository.transition_order(
                order.id, OrderStatus.PENDING.value, values
            ),
            values={
                Order.status: OrderStatus.REJECTED.value,
                Order.reviewed_by: rejected_by,
                Order.reviewed_at: datetime.utcnow(),
                Order.rejection_reason: reason,
            },
            current_status=order.status,
            company_id=order.company_id,
            company_status=CompanyStatus.REJECTED,
        )
        self.audit.record(
            AuditAction.ORDER_REJECTED, "order", order.id,
            user_id=rejected_by, company_id=order.company_id,
            details={"reason": reason}
        )
        self._commit()
        logger.info(f"Order {order.id} rejected by {rejected_by}")
        return self._order_response(self._refreshed(order))

    # =====================================================
    # OFFLINE PAYMENT REQUESTS
    # =====================================================

    def get_offline_requests(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[OfflineRequestResponse]:
        requests = self.repository.get_offline_requests(status, skip, limit)
        return [self._offline_response(r) for r in requests]

    def approve_offline_request(self, request_id: str, approved_by: str) -> OfflineRequestResponse:
        request = self._get_offline_request(request_id)
        self._decide(
            transition=lambda values: self.repository.transition_offline_request(
                request.id, OfflinePaymentStatus.PENDING.value, values
            ),
            values={
                OfflinePaymentRequest.status: OfflinePaymentStatus.APPROVED.value,
                OfflinePaymentRequest.reviewed_by: approved_by,
                OfflinePaymentRequest.reviewed_at: datetime.utcnow(),
            },
            current_status=request.status,
            company_id=request.company_id,
            company_status=CompanyStatus.ACTIVE,
            strict_company=True,
        )
        self.audit.record(
            AuditAction.OFFLINE_REQUEST_APPROVED, "offline_payment_request", request.id,
            user_id=approved_by, company_id=request.company_id,
            details={"amount": request.amount}
        )
        self._commit()
        logger.info(f"Offline request {request.id} approved by {approved_by}")
        return self._offline_response(self._refreshed(request))

    def reject_offline_request(
        self,
        request_id: str,
        reason: Optional[str],
        rejected_by: str
    ) -> OfflineRequestResponse:
        reason = require_reason(reason)
        request = self._get_offline_request(request_id)
        self._decide(
            transition=lambda values: self.repository.transition_offline_request(
                request.id, OfflinePaymentStatus.PENDING.value, values
            ),
            values={
                OfflinePaymentRequest.status: OfflinePaymentStatus.REJECTED.value,
                OfflinePaymentRequest.reviewed_by: rejected_by,
                OfflinePaymentRequest.reviewed_at: datetime.utcnow(),
                OfflinePaymentRequest.rejection_reason: reason,
            },
            current_status=request.status,
            company_id=request.company_id,
            company_status=CompanyStatus.REJECTED,
        )
        self.audit.record(
            AuditAction.OFFLINE_REQUEST_REJECTED, "offline_payment_request", request.id,
            user_id=rejected_by, company_id=request.company_id,
            details={"reason": reason}
        )
        self._commit()
        logger.info(f"Offline request {request.id} rejected by {rejected_by}")
        return self._offline_response(self._refreshed(request))

    # =====================================================
    # SUBDOMAIN REQUESTS
    # =====================================================

    def get_subdomain_requests(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[SubdomainRequestResponse]:
        companies = self.repository.get_subdomain_requests(status, skip, limit)
        return [self._subdomain_response(c) for c in companies]

    def approve_subdomain(self, company_id: str, approved_by: str) -> SubdomainRequestResponse:
        company = self._get_subdomain_request(company_id)
        changed = self.repository.transition_subdomain(
            company.id, SubdomainStatus.PENDING.value,
            {
                Company.subdomain_status: SubdomainStatus.APPROVED.value,
                Company.subdomain_reviewed_by: approved_by,
                Company.subdomain_reviewed_at: datetime.utcnow(),
                Company.subdomain_rejection_reason: None,
            }
        )
        if changed != 1:
            self.db.rollback()
            raise InvalidStateError(
                "Subdomain request is not pending",
                currentStatus=company.subdomain_status
            )
        self.audit.record(
            AuditAction.SUBDOMAIN_APPROVED, "company", company.id,
            user_id=approved_by, company_id=company.id,
            details={"subdomain": company.subdomain}
        )
        self._commit()
        logger.info(f"Subdomain '{company.subdomain}' approved for company {company.id}")
        return self._subdomain_response(self._refreshed(company))

    def reject_subdomain(
        self,
        company_id: str,
        reason: Optional[str],
        rejected_by: str
    ) -> SubdomainRequestResponse:
        reason = require_reason(reason)
        company = self._get_subdomain_request(company_id)
        changed = self.repository.transition_subdomain(
            company.id, SubdomainStatus.PENDING.value,
            {
                Company.subdomain_status: SubdomainStatus.REJECTED.value,
                Company.subdomain_reviewed_by: rejected_by,
                Company.subdomain_reviewed_at: datetime.utcnow(),
                Company.subdomain_rejection_reason: reason,
            }
        )
        if changed != 1:
            self.db.rollback()
            raise InvalidStateError(
                "Subdomain request is not pending",
                currentStatus=company.subdomain_status
            )
        self.audit.record(
            AuditAction.SUBDOMAIN_REJECTED, "company", company.id,
            user_id=rejected_by, company_id=company.id,
            details={"subdomain": company.subdomain, "reason": reason}
        )
        self._commit()
        logger.info(f"Subdomain '{company.subdomain}' rejected for company {company.id}")
        return self._subdomain_response(self._refreshed(company))

    # =====================================================
    # METRICS / AUDIT
    # =====================================================

    def get_stats(self) -> PlatformStats:
        return PlatformStats(**self.repository.get_platform_stats())

    def get_audit_logs(
        self,
        action: Optional[str] = None,
        company_id: Optional[str] = None,
        user_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[AuditLogResponse]:
        entries = self.audit.list_entries(action, company_id, user_id, skip, limit)
        return [AuditLogResponse.model_validate(e) for e in entries]

    # =====================================================
    # HELPERS
    # =====================================================

    def _decide(
        self,
        transition,
        values: dict,
        current_status: str,
        company_id: str,
        company_status: CompanyStatus,
        strict_company: bool = False
    ) -> None:
        """
        Apply a pending -> decided transition and move the company out of
        `pending`. On approval the company move must succeed too; a rejection
        leaves a company that is no longer pending as it is.
        """
        if transition(values) != 1:
            self.db.rollback()
            raise InvalidStateError("Request is not pending", currentStatus=current_status)

        moved = self.repository.transition_company(
            company_id, CompanyStatus.PENDING.value, company_status.value
        )
        if strict_company and moved != 1:
            self.db.rollback()
            company = self.repository.get_company_by_id(company_id)
            raise InvalidStateError(
                "Company is not awaiting approval",
                currentStatus=company.status if company else None
            )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _refreshed(self, instance):
        self.db.refresh(instance)
        return instance

    def _get_order(self, order_id: str) -> Order:
        order = self.repository.get_order_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _get_offline_request(self, request_id: str) -> OfflinePaymentRequest:
        request = self.repository.get_offline_request_by_id(request_id)
        if not request:
            raise NotFoundError("Offline payment request not found")
        return request

    def _get_subdomain_request(self, company_id: str) -> Company:
        company = self.repository.get_company_by_id(company_id)
        if not company or not company.subdomain_status:
            raise NotFoundError("Subdomain request not found")
        return company

    def _order_response(self, order: Order) -> OrderResponse:
        response = OrderResponse.model_validate(order)
        response.company_name = order.company.name if order.company else None
        return response

    def _offline_response(self, request: OfflinePaymentRequest) -> OfflineRequestResponse:
        response = OfflineRequestResponse.model_validate(request)
        response.company_name = request.company.name if request.company else None
        return response

    def _subdomain_response(self, company: Company) -> SubdomainRequestResponse:
        return SubdomainRequestResponse(
            company_id=company.id,
            company_name=company.name,
            subdomain=company.subdomain,
            status=company.subdomain_status,
            requested_at=company.subdomain_requested_at,
            reviewed_by=company.subdomain_reviewed_by,
            reviewed_at=company.subdomain_reviewed_at,
            rejection_reason=company.subdomain_rejection_reason,
        )
