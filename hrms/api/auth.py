# hrms/api/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.core.auth.dependencies import (
    CurrentUser, get_bearer_token, get_session_store, require_auth
)
from hrms.core.auth.schemas import TokenResponse, UserLogin, UserResponse
from hrms.core.auth.service import AuthService
from hrms.core.auth.session_store import SessionStore
from hrms.core.enums import AuditAction, CompanyStatus, UserRole
from hrms.core.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from hrms.modules.registration.schemas import CompanyRegistration, RegisterResponse
from hrms.modules.registration.service import RegistrationService
from hrms.shared.database.models import User
from hrms.shared.schemas.common import BaseResponse
from hrms.shared.services.audit_service import AuditService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(
    user_login: UserLogin,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store)
):
    """
    Log in with email and password

    **Body:**
    ```json
        {
            "email": "user@example.com",
            "password": "password123"
        }
    ```

    Users of a company still awaiting approval can log in; `companyStatus`
    tells the client to show the pending screen.
    """
    if not user_login.email or not user_login.password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == user_login.email.strip().lower()).first()

    if not user or not AuthService.verify_password(user_login.password, user.password):
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        raise ForbiddenError("Account is not active")

    company_status = user.company.status if user.company else None
    if company_status == CompanyStatus.SUSPENDED.value:
        raise ForbiddenError("Company is suspended")

    AuditService(db).record(
        AuditAction.LOGIN, "user", user.id,
        user_id=user.id, company_id=user.company_id
    )
    # The session write commits the audit entry with it
    token = store.create_session(user.id, UserRole(user.role), user.company_id)
    db.commit()

    logger.info(f"User {user.email} logged in")
    return TokenResponse(
        token=token,
        user=UserResponse.model_validate(user),
        company_status=company_status
    )


@router.post("/logout", response_model=BaseResponse)
def logout(
    token: Optional[str] = Depends(get_bearer_token),
    current_user: CurrentUser = Depends(require_auth),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store)
):
    """Revokes the bearer token; later requests with it get 401"""
    store.destroy_session(token)
    AuditService(db).record(
        AuditAction.LOGOUT, "user", current_user.id,
        user_id=current_user.id, company_id=current_user.company_id
    )
    db.commit()
    return BaseResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: CurrentUser = Depends(require_auth)):
    """
    Profile of the caller
    **Required headers:**
    - Authorization: Bearer {token}
    """
    return UserResponse.model_validate(current_user.user)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    registration_data: CompanyRegistration,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store)
):
    """
    Register a company and its admin in one call

    Creates the company `pending` on `planId` (the basic plan when omitted)
    and logs the admin in. Unlike the `/api/registration` wizard no payment
    record is created; a super-admin activates the company directly.
    """
    return RegistrationService(db, store).register_company(registration_data)
