# hrms/modules/companies/router.py
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from hrms.config.database import get_db
from hrms.core.auth.dependencies import (
    CurrentUser, enforce_company_scope, require_admin, require_company_admin,
    require_super_admin
)
from hrms.core.auth.schemas import UserResponse
from hrms.core.enums import CompanyStatus
from .service import CompaniesService
from .schemas import (
    CompanyAdminUpdate, CompanyCreate, CompanyResponse, CompanySettingsUpdate,
    SubdomainRequestCreate
)

router = APIRouter()


@router.get("", response_model=List[CompanyResponse])
def get_companies(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status: Optional[CompanyStatus] = Query(None, description="Filter by status"),
    plan: Optional[str] = Query(None, description="Filter by plan name"),
    search: Optional[str] = Query(None, description="Search name, email or subdomain"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Every tenant. Super-admin only."""
    service = CompaniesService(db)
    return service.get_all_companies(
        skip, limit, status.value if status else None, plan, search
    )


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    company_data: CompanyCreate,
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    **Provision a tenant directly** (super-admin only)

    No signup session, payment or approval is involved. The company gets a
    snapshot of `plan` like any other tenant.
    """
    service = CompaniesService(db)
    return service.create_company(company_data, current_user.id)


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(enforce_company_scope()),
    db: Session = Depends(get_db)
):
    """Own company, or any company for a super-admin"""
    service = CompaniesService(db)
    return service.get_company(company_id)


@router.patch("/{company_id}", response_model=CompanyResponse)
def update_company(
    update_data: CompanyAdminUpdate,
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    **Change status, plan or employee ceiling**

    - `status`: e.g. suspend or reactivate a tenant
    - `plan`: plan name; the plan must exist
    - `maxEmployees`: overrides the plan ceiling
    """
    service = CompaniesService(db)
    return service.update_company(company_id, update_data, current_user.id)


@router.patch("/{company_id}/settings", response_model=CompanyResponse)
def update_company_settings(
    settings_data: CompanySettingsUpdate,
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(enforce_company_scope(require_company_admin)),
    db: Session = Depends(get_db)
):
    """Profile and branding. Company admin of this company only."""
    service = CompaniesService(db)
    return service.update_settings(company_id, settings_data, current_user.id)


@router.get("/{company_id}/users", response_model=List[UserResponse])
def get_company_users(
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(enforce_company_scope(require_admin)),
    db: Session = Depends(get_db)
):
    service = CompaniesService(db)
    return service.get_company_users(company_id)


@router.post("/{company_id}/subdomain-request", response_model=CompanyResponse)
def request_subdomain(
    request: SubdomainRequestCreate,
    company_id: str = Path(..., description="Company ID"),
    current_user: CurrentUser = Depends(enforce_company_scope(require_company_admin)),
    db: Session = Depends(get_db)
):
    """Ask for a custom subdomain; a super-admin approves or rejects it"""
    service = CompaniesService(db)
    return service.request_subdomain(company_id, request, current_user.id)
