# hrms/modules/companies/service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.core.auth.schemas import UserResponse
from hrms.core.auth.service import AuthService
from hrms.core.enums import AuditAction, SubdomainStatus
from hrms.core.exceptions import (
    DuplicateFieldError, InvalidStateError, NotFoundError, ValidationError
)
from hrms.modules.registration.repository import RegistrationRepository
from hrms.shared.database.integrity import duplicate_field_from
from hrms.shared.database.models import Company
from hrms.shared.services.audit_service import AuditService
from .repository import CompaniesRepository
from .schemas import (
    CompanyAdminUpdate, CompanyCreate, CompanyResponse, CompanySettingsUpdate,
    SubdomainRequestCreate
)

logger = logging.getLogger(__name__)


class CompaniesService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = CompaniesRepository(db)
        self.signups = RegistrationRepository(db)
        self.audit = AuditService(db)

    def get_company_or_404(self, company_id: str) -> Company:
        company = self.repository.get_company_by_id(company_id)
        if not company:
            raise NotFoundError("Company not found")
        return company

    def get_all_companies(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
        plan: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[CompanyResponse]:
        companies = self.repository.get_all_companies(skip, limit, status, plan, search)
        return [CompanyResponse.model_validate(c) for c in companies]

    def get_company(self, company_id: str) -> CompanyResponse:
        return CompanyResponse.model_validate(self.get_company_or_404(company_id))

    def create_company(self, company_data: CompanyCreate, created_by: str) -> CompanyResponse:
        """
        Tenant provisioned by a super-admin, bypassing signup and payment.
        Active unless `status` says otherwise; `adminPassword` also creates a
        company admin on the company email.
        """
        plan_name = company_data.plan or settings.default_plan
        plan = self.signups.get_plan_by_name(plan_name)
        if not plan:
            raise ValidationError(f"Plan '{plan_name}' does not exist")

        if self.signups.email_in_use(company_data.email):
            raise DuplicateFieldError("email", "Email already registered")
        if self.signups.phone_in_use(company_data.phone):
            raise DuplicateFieldError("phone", "Phone number already registered")

        admin = None
        if company_data.admin_password:
            admin = {
                "email": company_data.email,
                "password": AuthService.get_password_hash(company_data.admin_password),
                "name": company_data.admin_name or f"{company_data.name} Admin",
            }

        try:
            company, admin_user = self.signups.provision_tenant(
                plan,
                company_fields={
                    "name": company_data.name,
                    "email": company_data.email,
                    "phone": company_data.phone,
                    "address": company_data.address,
                    "website": company_data.website,
                },
                admin=admin,
                status=company_data.status,
                max_employees=company_data.max_employees,
            )
            self.audit.record(
                AuditAction.COMPANY_CREATED, "company", company.id,
                user_id=created_by, company_id=company.id,
                details={
                    "plan": plan.name,
                    "status": company.status,
                    "adminId": admin_user.id if admin_user else None,
                }
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateFieldError(duplicate_field_from(e) or "email")

        self.db.refresh(company)
        logger.info(f"Company {company.id} created by {created_by} on plan {plan.name}")
        return CompanyResponse.model_validate(company)

    def update_company(
        self,
        company_id: str,
        update_data: CompanyAdminUpdate,
        updated_by: str
    ) -> CompanyResponse:
        """
        Super-admin edit of status and entitlements.

        Switching plan re-captures the snapshot from the current catalogue;
        `maxEmployees` falls back to the new plan's ceiling unless given.
        """
        company = self.get_company_or_404(company_id)
        changes = update_data.model_dump(exclude_unset=True)

        if changes.get("status") is not None:
            company.status = changes["status"].value

        if changes.get("plan") is not None:
            plan = self.repository.get_plan_by_name(changes["plan"])
            if not plan:
                raise ValidationError(f"Plan '{changes['plan']}' does not exist")
            company.plan = plan.name
            company.plan_id = plan.id
            company.plan_snapshot = plan.snapshot()
            company.max_employees = plan.max_employees

        if changes.get("max_employees") is not None:
            company.max_employees = changes["max_employees"]

        employee_count = self.repository.count_employees(company.id)
        if company.max_employees < employee_count:
            self.db.rollback()
            raise ValidationError(
                f"maxEmployees cannot be lower than the current employee count ({employee_count})"
            )

        self.audit.record(
            AuditAction.COMPANY_UPDATED, "company", company.id,
            user_id=updated_by, company_id=company.id,
            details={k: (v.value if hasattr(v, "value") else v) for k, v in changes.items()}
        )
        self.db.commit()
        self.db.refresh(company)

        logger.info(f"Company {company.id} updated by {updated_by}: {sorted(changes)}")
        return CompanyResponse.model_validate(company)

    def update_settings(
        self,
        company_id: str,
        settings_data: CompanySettingsUpdate,
        updated_by: str
    ) -> CompanyResponse:
        company = self.get_company_or_404(company_id)
        changes = settings_data.model_dump(exclude_unset=True)

        phone = changes.get("phone")
        if phone and self.repository.phone_taken(phone, company.id):
            raise DuplicateFieldError("phone", "Phone number already registered")

        for field, value in changes.items():
            if value is not None:
                setattr(company, field, value)

        self.audit.record(
            AuditAction.COMPANY_SETTINGS_UPDATED, "company", company.id,
            user_id=updated_by, company_id=company.id,
            details={"changes": sorted(changes)}
        )
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = duplicate_field_from(e)
            if field is None:
                raise
            raise DuplicateFieldError(field)

        self.db.refresh(company)
        return CompanyResponse.model_validate(company)

    def get_company_users(self, company_id: str) -> List[UserResponse]:
        self.get_company_or_404(company_id)
        return [UserResponse.model_validate(u) for u in self.repository.get_company_users(company_id)]

    def request_subdomain(
        self,
        company_id: str,
        request: SubdomainRequestCreate,
        requested_by: str
    ) -> CompanyResponse:
        company = self.get_company_or_404(company_id)

        if company.subdomain_status == SubdomainStatus.PENDING.value:
            raise InvalidStateError(
                "A subdomain request is already pending",
                currentStatus=company.subdomain_status
            )

        if self.repository.subdomain_taken(request.subdomain, company.id):
            raise DuplicateFieldError("subdomain", "Subdomain already taken")

        company.subdomain = request.subdomain
        company.subdomain_status = SubdomainStatus.PENDING.value
        company.subdomain_requested_at = datetime.utcnow()
        company.subdomain_reviewed_by = None
        company.subdomain_reviewed_at = None
        company.subdomain_rejection_reason = None

        self.audit.record(
            AuditAction.SUBDOMAIN_REQUESTED, "company", company.id,
            user_id=requested_by, company_id=company.id,
            details={"subdomain": request.subdomain}
        )
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateFieldError("subdomain", "Subdomain already taken")

        self.db.refresh(company)
        logger.info(f"Subdomain '{request.subdomain}' requested for company {company.id}")
        return CompanyResponse.model_validate(company)
