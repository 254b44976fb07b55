# hrms/modules/registration/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Any, Dict, Iterable, Optional, Set, Tuple
from datetime import datetime

from hrms.core.enums import CompanyStatus, RegistrationStep, UserRole, UserStatus
from hrms.shared.database.models import Company, Plan, RegistrationSession, User


class RegistrationRepository:
    """Data access for the signup wizard. Writes are flushed, the service commits."""

    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # SESSIONS
    # =====================================================

    def get_session(self, session_id: str) -> Optional[RegistrationSession]:
        return (
            self.db.query(RegistrationSession)
            .filter(RegistrationSession.id == session_id)
            .first()
        )

    def create_session(self, session: RegistrationSession) -> RegistrationSession:
        self.db.add(session)
        self.db.flush()
        return session

    def claim_for_payment(self, session_id: str) -> bool:
        """Compare-and-set payment -> complete; False if another call got there first"""
        updated = (
            self.db.query(RegistrationSession)
            .filter(
                RegistrationSession.id == session_id,
                RegistrationSession.step == RegistrationStep.PAYMENT.value,
            )
            .update(
                {RegistrationSession.step: RegistrationStep.COMPLETE.value},
                synchronize_session=False,
            )
        )
        return updated == 1

    def purge_expired_sessions(self, now: datetime) -> int:
        """Drop abandoned signups; completed ones are kept as history"""
        return (
            self.db.query(RegistrationSession)
            .filter(
                RegistrationSession.step != RegistrationStep.COMPLETE.value,
                RegistrationSession.expires_at <= now,
            )
            .delete(synchronize_session=False)
        )

    # =====================================================
    # UNIQUENESS CHECKS
    # =====================================================

    def _live_sessions(self, exclude_session_id: Optional[str] = None):
        query = self.db.query(RegistrationSession).filter(
            RegistrationSession.step != RegistrationStep.COMPLETE.value,
            RegistrationSession.expires_at > datetime.utcnow(),
        )
        if exclude_session_id:
            query = query.filter(RegistrationSession.id != exclude_session_id)
        return query

    def emails_in_use(
        self,
        emails: Iterable[str],
        exclude_session_id: Optional[str] = None
    ) -> Set[str]:
        """
        Emails already claimed by a user, a company, a live signup's admin or
        an employee listed in a live signup. A session never conflicts with
        itself when `exclude_session_id` is given.
        """
        wanted = {e.lower() for e in emails}
        if not wanted:
            return set()
        emails = sorted(wanted)

        taken = {
            row.email.lower()
            for row in self.db.query(User.email).filter(func.lower(User.email).in_(emails))
        }
        taken |= {
            row.email.lower()
            for row in self.db.query(Company.email).filter(func.lower(Company.email).in_(emails))
        }

        live = self._live_sessions(exclude_session_id)
        taken |= {
            row.email.lower()
            for row in live.with_entities(RegistrationSession.email)
            .filter(RegistrationSession.email.in_(emails))
        }
        # Listed employees only exist inside session_data until payment
        for row in live.with_entities(RegistrationSession.session_data):
            for employee in (row.session_data or {}).get("employees") or []:
                if employee["email"].lower() in wanted:
                    taken.add(employee["email"].lower())
        return taken

    def email_in_use(self, email: str) -> bool:
        return bool(self.emails_in_use([email]))

    def phone_in_use(self, phone: str) -> bool:
        if self.db.query(Company.id).filter(Company.phone == phone).first():
            return True
        return self.db.query(RegistrationSession.id).filter(
            RegistrationSession.phone == phone,
            RegistrationSession.step != RegistrationStep.COMPLETE.value,
        ).first() is not None

    # =====================================================
    # ACTIVATION RECORDS
    # =====================================================

    def get_plan(self, plan_id: Optional[str]) -> Optional[Plan]:
        if not plan_id:
            return None
        return self.db.query(Plan).filter(Plan.id == plan_id).first()

    def add(self, *records):
        for record in records:
            self.db.add(record)
        self.db.flush()
        return records

    def get_plan_by_name(self, name: str) -> Optional[Plan]:
        return self.db.query(Plan).filter(Plan.name == name).first()

    def provision_tenant(
        self,
        plan: Plan,
        company_fields: Dict[str, Any],
        admin: Optional[Dict[str, Any]] = None,
        employees: Iterable[Dict[str, Any]] = (),
        employee_count: int = 1,
        status: CompanyStatus = CompanyStatus.PENDING,
        max_employees: Optional[int] = None
    ) -> Tuple[Company, Optional[User]]:
        """
        Company on `plan` with its admin and listed employees. Passwords arrive
        hashed. Flushed only: the caller commits or rolls back everything.
        """
        company = Company(
            **company_fields,
            status=status.value,
            plan_id=plan.id,
            plan=plan.name,
            max_employees=max_employees or plan.max_employees,
            plan_snapshot={**plan.snapshot(), "employeeCount": employee_count},
        )
        self.add(company)

        admin_user = None
        if admin:
            admin_user = User(
                email=admin["email"],
                password=admin["password"],
                name=admin["name"],
                role=UserRole.COMPANY_ADMIN.value,
                company_id=company.id,
                position="Company Administrator",
                status=UserStatus.ACTIVE.value,
            )
            self.add(admin_user)

        employees = list(employees)
        if employees:
            self.add(*[
                User(
                    email=emp["email"],
                    password=emp["password"],
                    name=emp["name"],
                    role=UserRole.EMPLOYEE.value,
                    company_id=company.id,
                    department=emp.get("department"),
                    position=emp.get("position"),
                    status=UserStatus.ACTIVE.value,
                )
                for emp in employees
            ])

        return company, admin_user
