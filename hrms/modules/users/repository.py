# hrms/modules/users/repository.py
from sqlalchemy.orm import Session
from typing import Optional

from hrms.core.enums import UserRole
from hrms.shared.database.models import Company, User
from hrms.modules.registration.repository import RegistrationRepository


class UsersRepository:
    def __init__(self, db: Session):
        self.db = db

    def email_in_use(self, email: str) -> bool:
        """Taken by an account or reserved by a signup still in progress"""
        return RegistrationRepository(self.db).email_in_use(email)

    def get_company(self, company_id: str) -> Optional[Company]:
        return self.db.query(Company).filter(Company.id == company_id).first()

    def count_employees(self, company_id: str) -> int:
        return self.db.query(User).filter(
            User.company_id == company_id,
            User.role == UserRole.EMPLOYEE.value
        ).count()

    def create_user(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user
