# hrms/core/auth/dependencies.py
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.core.auth.schemas import SessionContext
from hrms.core.auth.session_store import SessionStore, build_session_store
from hrms.core.enums import CompanyStatus, UserRole
from hrms.core.exceptions import ForbiddenError, UnauthorizedError
from hrms.shared.database.models import Company, User


@dataclass
class CurrentUser:
    """Resolved caller: the session plus the live account row"""
    session: SessionContext
    user: User

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.session.role

    @property
    def company_id(self) -> Optional[str]:
        return self.session.company_id


bearer = HTTPBearer(auto_error=False)


def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    return build_session_store(db)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)
) -> Optional[str]:
    return credentials.credentials if credentials else None


def require_auth(
    token: Optional[str] = Depends(get_bearer_token),
    store: SessionStore = Depends(get_session_store),
    db: Session = Depends(get_db)
) -> CurrentUser:
    """401 without a valid session, 403 for inactive accounts or suspended tenants"""
    session = store.resolve(token) if token else None
    if session is None:
        raise UnauthorizedError("Authentication required")

    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None:
        raise UnauthorizedError("Account no longer exists")

    if not user.is_active:
        raise ForbiddenError("Account is not active")

    if user.company_id:
        company_status = (
            db.query(Company.status).filter(Company.id == user.company_id).scalar()
        )
        if company_status == CompanyStatus.SUSPENDED.value:
            raise ForbiddenError("Company is suspended")

    return CurrentUser(session=session, user=user)


def require_roles(allowed_roles: Iterable[UserRole]) -> Callable:
    """Factory for a dependency that admits only the given roles"""
    allowed_roles = tuple(allowed_roles)

    async def role_checker(current_user: CurrentUser = Depends(require_auth)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise ForbiddenError(
                f"Role '{current_user.role.value}' is not allowed. "
                f"Allowed roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


require_super_admin = require_roles([UserRole.SUPER_ADMIN])
require_company_admin = require_roles([UserRole.COMPANY_ADMIN])
require_admin = require_roles([UserRole.SUPER_ADMIN, UserRole.COMPANY_ADMIN])


def can_access_company(current_user: CurrentUser, company_id: Optional[str]) -> bool:
    """Super-admins see every tenant; everyone else only their own"""
    if current_user.role == UserRole.SUPER_ADMIN:
        return True
    return company_id is not None and current_user.company_id == company_id


def enforce_company_scope(guard: Callable = require_auth) -> Callable:
    """
    Compose a role guard with the tenant-isolation check.

    The target company comes from the `company_id` path (or query) parameter
    of the route, so `/companies/{company_id}` routes can use it directly.
    """
    async def scope_checker(
        company_id: str,
        current_user: CurrentUser = Depends(guard)
    ) -> CurrentUser:
        if not can_access_company(current_user, company_id):
            raise ForbiddenError("Access to this company is not allowed")
        return current_user
    return scope_checker
