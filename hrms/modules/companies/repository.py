# hrms/modules/companies/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional

from hrms.core.enums import RegistrationStep, UserRole
from hrms.shared.database.models import Company, Plan, RegistrationSession, User


class CompaniesRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all_companies(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
        plan: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Company]:
        query = self.db.query(Company)

        if status:
            query = query.filter(Company.status == status)

        if plan:
            query = query.filter(Company.plan == plan)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Company.name.ilike(search_pattern),
                    Company.email.ilike(search_pattern),
                    Company.subdomain.ilike(search_pattern)
                )
            )

        return query.order_by(Company.created_at.desc()).offset(skip).limit(limit).all()

    def get_company_by_id(self, company_id: str) -> Optional[Company]:
        return self.db.query(Company).filter(Company.id == company_id).first()

    def phone_taken(self, phone: str, exclude_company_id: str) -> bool:
        """Held by another company or reserved by a signup still in progress"""
        if self.db.query(Company.id).filter(
            Company.phone == phone,
            Company.id != exclude_company_id
        ).first():
            return True
        return self.db.query(RegistrationSession.id).filter(
            RegistrationSession.phone == phone,
            RegistrationSession.step != RegistrationStep.COMPLETE.value
        ).first() is not None

    def subdomain_taken(self, subdomain: str, exclude_company_id: str) -> bool:
        return self.db.query(Company.id).filter(
            Company.subdomain == subdomain,
            Company.id != exclude_company_id
        ).first() is not None

    def get_plan_by_name(self, name: str) -> Optional[Plan]:
        return self.db.query(Plan).filter(Plan.name == name).first()

    def get_company_users(self, company_id: str) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.company_id == company_id)
            .order_by(User.created_at, User.email)
            .all()
        )

    def count_employees(self, company_id: str) -> int:
        return self.db.query(User).filter(
            User.company_id == company_id,
            User.role == UserRole.EMPLOYEE.value
        ).count()
