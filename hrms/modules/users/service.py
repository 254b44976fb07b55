# hrms/modules/users/service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.core.auth.dependencies import CurrentUser
from hrms.core.auth.schemas import UserResponse
from hrms.core.auth.service import AuthService
from hrms.core.enums import AuditAction, UserRole
from hrms.core.exceptions import (
    DuplicateFieldError, ForbiddenError, NotFoundError,
    PlanLimitExceededError, ValidationError
)
from hrms.shared.database.models import User
from hrms.shared.services.audit_service import AuditService
from .repository import UsersRepository
from .schemas import UserCreate

logger = logging.getLogger(__name__)

ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN)


class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = UsersRepository(db)
        self.audit = AuditService(db)

    def create_user(self, user_data: UserCreate, current_user: CurrentUser) -> UserResponse:
        """
        Company admins may only add employees to their own company; role and
        company are forced server-side. Super-admins may create any role.
        Employees count against the company's `maxEmployees`.
        """
        role = user_data.role
        company_id = user_data.company_id

        if role in ADMIN_ROLES and current_user.role != UserRole.SUPER_ADMIN:
            raise ForbiddenError("Only super-admins can create admin accounts")

        if current_user.role == UserRole.COMPANY_ADMIN:
            role = UserRole.EMPLOYEE
            company_id = current_user.company_id

        if role == UserRole.SUPER_ADMIN:
            company_id = None
        elif not company_id:
            raise ValidationError("companyId is required")

        if company_id:
            company = self.repository.get_company(company_id)
            if not company:
                raise NotFoundError("Company not found")

            if role == UserRole.EMPLOYEE:
                requested = self.repository.count_employees(company_id) + 1
                if requested > company.max_employees:
                    raise PlanLimitExceededError(company.max_employees, requested)

        if self.repository.email_in_use(user_data.email):
            raise DuplicateFieldError("email", "Email already registered")

        user = User(
            email=user_data.email,
            password=AuthService.get_password_hash(user_data.password),
            name=user_data.name,
            role=role.value,
            company_id=company_id,
            department=user_data.department,
            position=user_data.position,
            status=user_data.status.value,
        )
        try:
            self.repository.create_user(user)
            self.audit.record(
                AuditAction.USER_CREATED, "user", user.id,
                user_id=current_user.id, company_id=company_id,
                details={"email": user.email, "role": user.role}
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateFieldError("email", "Email already registered")

        self.db.refresh(user)
        logger.info(f"User {user.email} ({user.role}) created by {current_user.id}")
        return UserResponse.model_validate(user)
