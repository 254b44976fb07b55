# hrms/modules/registration/service.py
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.core.auth.schemas import UserResponse
from hrms.core.auth.service import AuthService
from hrms.core.auth.session_store import SessionStore
from hrms.core.enums import (
    AuditAction, OfflinePaymentStatus, OrderStatus, PaymentMethod,
    RegistrationStep, UserRole
)
from hrms.core.exceptions import (
    DuplicateFieldError, InvalidStateError, NotFoundError,
    PlanLimitExceededError, RegistrationExpiredError, ValidationError
)
from hrms.shared.database.integrity import duplicate_field_from
from hrms.shared.database.models import (
    OfflinePaymentRequest, Order, Plan, RegistrationSession
)
from hrms.shared.services.audit_service import AuditService
from .pricing import calculate_total_cost, quote_plan
from .repository import RegistrationRepository
from .schemas import (
    AddEmployeesRequest, CompanyRegistration, CompanySummary, PayOfflineRequest,
    PayOnlineRequest, PaymentResponse, RegisterResponse, RegistrationSessionResponse,
    RegistrationStart, RegistrationStartResponse, RegistrationStepResponse
)

logger = logging.getLogger(__name__)

# Steps from which each call is accepted
SELECT_PLAN_STEPS = (
    RegistrationStep.PLAN_SELECTION,
    RegistrationStep.EMPLOYEE_COUNT,
    RegistrationStep.PAYMENT,
)
ADD_EMPLOYEES_STEPS = (RegistrationStep.EMPLOYEE_COUNT, RegistrationStep.PAYMENT)
PAYMENT_STEPS = (RegistrationStep.PAYMENT,)


class RegistrationService:
    """
    Server-side signup wizard.

    start -> select-plan -> add-employees -> pay-online | pay-offline

    The session's `step` names the next call the server accepts. Nothing
    outside the session row is written until payment, where the company,
    its admin, the listed employees and the payment record are created in
    a single transaction.
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.db = db
        self.repository = RegistrationRepository(db)
        self.session_store = session_store
        self.audit = AuditService(db)

    # =====================================================
    # STEP 1 - COMPANY INFO
    # =====================================================

    def start(self, data: RegistrationStart) -> RegistrationStartResponse:
        self.purge_expired()

        if self.repository.email_in_use(data.email):
            raise DuplicateFieldError("email", "Email already registered")
        if self.repository.phone_in_use(data.phone):
            raise DuplicateFieldError("phone", "Phone number already registered")

        now = datetime.utcnow()
        session = RegistrationSession(
            step=RegistrationStep.PLAN_SELECTION.value,
            email=data.email,
            phone=data.phone,
            session_data={
                "companyName": data.company_name,
                "adminFirstName": data.admin_first_name,
                "adminLastName": data.admin_last_name,
                "gender": data.gender,
                "email": data.email,
                "phone": data.phone,
                "password": AuthService.get_password_hash(data.password),
            },
            expires_at=now + timedelta(hours=settings.registration_session_ttl_hours),
        )

        try:
            self.repository.create_session(session)
            self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent signup with the same email/phone
            self.db.rollback()
            raise DuplicateFieldError(duplicate_field_from(e) or "email")

        logger.info(f"Registration session {session.id} started")
        return RegistrationStartResponse(session_id=session.id)

    # =====================================================
    # STEP 2 - PLAN SELECTION
    # =====================================================

    def select_plan(self, session_id: str, plan_id: str) -> RegistrationStepResponse:
        session = self._get_live_session(session_id)
        self._require_step(session, SELECT_PLAN_STEPS, "select a plan")

        plan = self.repository.get_plan(plan_id)
        if not plan or not plan.is_active:
            raise ValidationError("Invalid or inactive plan selected")

        # Choosing a plan again rewinds the wizard to the employee step
        data = dict(session.session_data)
        data["planId"] = plan.id
        data.pop("employees", None)
        data.pop("employeeCount", None)
        session.session_data = data
        session.step = RegistrationStep.EMPLOYEE_COUNT.value
        self.db.commit()

        return RegistrationStepResponse(
            message="Plan selected",
            session=self._to_response(session, plan),
        )

    # =====================================================
    # STEP 3 - EMPLOYEE COUNT
    # =====================================================

    def add_employees(
        self,
        session_id: str,
        request: AddEmployeesRequest
    ) -> RegistrationStepResponse:
        session = self._get_live_session(session_id)
        self._require_step(session, ADD_EMPLOYEES_STEPS, "declare employees")

        plan = self._selected_plan(session)
        employees = request.employees
        employee_count = request.employee_count or len(employees) or 1

        if employee_count < len(employees):
            raise ValidationError(
                "employeeCount cannot be lower than the number of listed employees"
            )
        if employee_count > plan.max_employees:
            raise PlanLimitExceededError(plan.max_employees, employee_count)

        self._check_employee_emails(session, [e.email for e in employees])

        data = dict(session.session_data)
        data["employees"] = [
            {
                "name": e.name,
                "email": e.email,
                "department": e.department,
                "position": e.position,
            }
            for e in employees
        ]
        data["employeeCount"] = employee_count
        session.session_data = data
        session.step = RegistrationStep.PAYMENT.value
        self.db.commit()

        return RegistrationStepResponse(
            message="Employees saved",
            session=self._to_response(session, plan),
        )

    # =====================================================
    # STEP 4 - PAYMENT
    # =====================================================

    def pay_online(self, session_id: str, card: PayOnlineRequest) -> PaymentResponse:
        session = self._get_live_session(session_id)
        self._require_step(session, PAYMENT_STEPS, "pay")

        if not card.is_complete():
            raise ValidationError("All card details are required")

        return self._complete(session, PaymentMethod.ONLINE, card=card)

    def pay_offline(self, session_id: str, request: PayOfflineRequest) -> PaymentResponse:
        session = self._get_live_session(session_id)
        self._require_step(session, PAYMENT_STEPS, "pay")

        return self._complete(session, PaymentMethod.OFFLINE, notes=request.notes)

    def _complete(
        self,
        session: RegistrationSession,
        method: PaymentMethod,
        card: Optional[PayOnlineRequest] = None,
        notes: Optional[str] = None
    ) -> PaymentResponse:
        """Create every tenant record at once; on any failure nothing is kept"""
        plan = self._selected_plan(session)
        data = session.session_data
        employee_count = data.get("employeeCount") or 1
        amount = calculate_total_cost(
            plan.price,
            plan.employees_included,
            plan.price_per_additional_employee,
            employee_count,
        )

        try:
            if not self.repository.claim_for_payment(session.id):
                raise InvalidStateError(
                    "Registration is already being completed",
                    currentStatus=RegistrationStep.COMPLETE.value,
                )

            employees = data.get("employees") or []
            default_hash = None
            if employees:
                default_hash = AuthService.get_password_hash(settings.default_employee_password)
            company, admin = self.repository.provision_tenant(
                plan,
                company_fields={
                    "name": data["companyName"],
                    "email": data["email"],
                    "phone": data["phone"],
                },
                admin={
                    "email": data["email"],
                    "password": data["password"],
                    "name": f"{data['adminFirstName']} {data['adminLastName']}",
                },
                employees=[{**emp, "password": default_hash} for emp in employees],
                employee_count=employee_count,
            )

            order = offline_request = None
            if method == PaymentMethod.ONLINE:
                order = Order(
                    company_id=company.id,
                    plan_id=plan.id,
                    amount=amount,
                    currency=settings.currency,
                    status=OrderStatus.PENDING.value,
                    payment_provider="dummy",
                    payment_intent_id=f"dummy_{int(datetime.utcnow().timestamp() * 1000)}",
                    payment_metadata={"cardLast4": card.card_number[-4:]},
                )
                self.repository.add(order)
            else:
                offline_request = OfflinePaymentRequest(
                    company_id=company.id,
                    plan_id=plan.id,
                    amount=amount,
                    requested_by=admin.id,
                    notes=notes or "",
                    status=OfflinePaymentStatus.PENDING.value,
                )
                self.repository.add(offline_request)

            session.company_id = company.id
            session.order_id = order.id if order else None
            session.offline_request_id = offline_request.id if offline_request else None
            session.step = RegistrationStep.COMPLETE.value

            self.audit.record(
                AuditAction.REGISTRATION_COMPLETED, "company", company.id,
                user_id=admin.id, company_id=company.id,
                details={
                    "paymentMethod": method.value,
                    "planId": plan.id,
                    "employeeCount": employee_count,
                    "amount": amount,
                },
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = duplicate_field_from(e)
            if field is None:
                raise
            raise DuplicateFieldError(field)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Registration {session.id} completed: company {company.id} pending "
            f"({method.value}, amount {amount} {settings.currency})"
        )

        token = self.session_store.create_session(admin.id, UserRole.COMPANY_ADMIN, company.id)

        return PaymentResponse(
            message="Registration complete, awaiting approval",
            order_id=order.id if order else None,
            offline_request_id=offline_request.id if offline_request else None,
            amount=amount,
            currency=settings.currency,
            token=token,
            user=UserResponse.model_validate(admin),
            company=CompanySummary.model_validate(company),
        )

    # =====================================================
    # ONE-CALL SIGNUP
    # =====================================================

    def register_company(self, data: CompanyRegistration) -> RegisterResponse:
        """
        Company and admin in a single request, without the wizard or a payment
        record. The company stays pending until a super-admin activates it.
        """
        self.purge_expired()

        plan = (
            self.repository.get_plan(data.plan_id) if data.plan_id
            else self.repository.get_plan_by_name(settings.default_plan)
        )
        if not plan:
            raise ValidationError("Selected plan not found")
        if not plan.is_active:
            raise ValidationError("Selected plan is not active")

        if self.repository.email_in_use(data.email):
            raise DuplicateFieldError("email", "Email already registered")
        if self.repository.phone_in_use(data.phone):
            raise DuplicateFieldError("phone", "Phone number already registered")

        try:
            company, admin = self.repository.provision_tenant(
                plan,
                company_fields={
                    "name": data.company_name,
                    "email": data.email,
                    "phone": data.phone,
                },
                admin={
                    "email": data.email,
                    "password": AuthService.get_password_hash(data.password),
                    "name": f"{data.admin_first_name} {data.admin_last_name}",
                },
            )
            self.audit.record(
                AuditAction.COMPANY_REGISTERED, "company", company.id,
                user_id=admin.id, company_id=company.id,
                details={"planId": plan.id},
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateFieldError(duplicate_field_from(e) or "email")

        logger.info(f"Company {company.id} registered directly on plan {plan.name}")

        token = self.session_store.create_session(admin.id, UserRole.COMPANY_ADMIN, company.id)
        return RegisterResponse(
            token=token,
            user=UserResponse.model_validate(admin),
            company=CompanySummary.model_validate(company),
        )

    # =====================================================
    # QUERIES AND MAINTENANCE
    # =====================================================

    def get_session(self, session_id: str) -> RegistrationSessionResponse:
        session = self._get_live_session(session_id, lookup=True)
        plan = self.repository.get_plan(session.session_data.get("planId"))
        return self._to_response(session, plan)

    def purge_expired(self) -> int:
        removed = self.repository.purge_expired_sessions(datetime.utcnow())
        self.db.commit()
        if removed:
            logger.info(f"Purged {removed} expired registration sessions")
        return removed

    # =====================================================
    # HELPERS
    # =====================================================

    def _get_live_session(self, session_id: str, lookup: bool = False) -> RegistrationSession:
        """
        Step calls on an unknown session mean `start` never happened and are
        rejected as out of order; a plain lookup answers 404.
        """
        session = self.repository.get_session(session_id)
        if not session and lookup:
            raise NotFoundError("Registration session not found")
        if not session:
            raise InvalidStateError("Registration has not been started", currentStatus=None)
        if session.step != RegistrationStep.COMPLETE.value and datetime.utcnow() > session.expires_at:
            raise RegistrationExpiredError()
        return session

    def _require_step(
        self,
        session: RegistrationSession,
        allowed: Iterable[RegistrationStep],
        action: str
    ) -> None:
        if RegistrationStep(session.step) not in allowed:
            raise InvalidStateError(
                f"Cannot {action} while registration is at step '{session.step}'",
                currentStatus=session.step,
            )

    def _selected_plan(self, session: RegistrationSession) -> Plan:
        plan = self.repository.get_plan(session.session_data.get("planId"))
        if not plan:
            raise InvalidStateError(
                "No plan selected for this registration",
                currentStatus=session.step,
            )
        if not plan.is_active:
            raise ValidationError("Selected plan is no longer available")
        return plan

    def _check_employee_emails(self, session: RegistrationSession, emails) -> None:
        seen = {session.email.lower()}
        for index, email in enumerate(emails):
            if email.lower() in seen:
                raise DuplicateFieldError(
                    f"employees.{index}.email", f"Duplicate employee email {email}"
                )
            seen.add(email.lower())

        taken = self.repository.emails_in_use(emails, exclude_session_id=session.id)
        for index, email in enumerate(emails):
            if email.lower() in taken:
                raise DuplicateFieldError(
                    f"employees.{index}.email", f"Email {email} already registered"
                )

    def _to_response(
        self,
        session: RegistrationSession,
        plan: Optional[Plan]
    ) -> RegistrationSessionResponse:
        data = session.session_data or {}
        employee_count = data.get("employeeCount")
        quote = None
        if plan is not None:
            quote = quote_plan(plan, employee_count or 1)
        return RegistrationSessionResponse(
            id=session.id,
            step=RegistrationStep(session.step),
            company_name=data.get("companyName"),
            email=session.email,
            plan_id=data.get("planId"),
            employee_count=employee_count,
            employees=data.get("employees") or [],
            quote=quote,
            company_id=session.company_id,
            expires_at=session.expires_at,
        )
