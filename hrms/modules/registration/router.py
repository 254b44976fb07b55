# hrms/modules/registration/router.py
from fastapi import APIRouter, Depends, Path, status
from typing import Optional
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.core.auth.dependencies import get_session_store
from hrms.core.auth.session_store import SessionStore
from .service import RegistrationService
from .schemas import (
    AddEmployeesRequest, PayOfflineRequest, PayOnlineRequest, PaymentResponse,
    RegistrationSessionResponse, RegistrationStart, RegistrationStartResponse,
    RegistrationStepResponse, SelectPlanRequest
)

router = APIRouter()


def get_registration_service(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store)
) -> RegistrationService:
    return RegistrationService(db, store)


@router.post("/start", response_model=RegistrationStartResponse, status_code=status.HTTP_201_CREATED)
def start_registration(
    registration_data: RegistrationStart,
    service: RegistrationService = Depends(get_registration_service)
):
    """
    **Step 1: company and admin details**

    Validates the form, rejects an email or phone already registered
    (`duplicateField` names the offending input) and opens a registration
    session valid for 24 hours.
    """
    return service.start(registration_data)


@router.get("/{session_id}", response_model=RegistrationSessionResponse)
def get_registration(
    session_id: str = Path(..., description="Registration session ID"),
    service: RegistrationService = Depends(get_registration_service)
):
    """Current step, selections and price quote, for resuming the wizard"""
    return service.get_session(session_id)


@router.post("/{session_id}/select-plan", response_model=RegistrationStepResponse)
def select_plan(
    request: SelectPlanRequest,
    session_id: str = Path(..., description="Registration session ID"),
    service: RegistrationService = Depends(get_registration_service)
):
    """**Step 2: choose an active plan**"""
    return service.select_plan(session_id, request.plan_id)


@router.post("/{session_id}/add-employees", response_model=RegistrationStepResponse)
def add_employees(
    request: Optional[AddEmployeesRequest] = None,
    session_id: str = Path(..., description="Registration session ID"),
    service: RegistrationService = Depends(get_registration_service)
):
    """
    **Step 3: declare the employee count**

    `employeeCount` defaults to the number of listed employees, or 1.
    It may not exceed the plan's `maxEmployees`.
    """
    return service.add_employees(session_id, request or AddEmployeesRequest())


@router.post("/{session_id}/pay-online", response_model=PaymentResponse)
def pay_online(
    card: PayOnlineRequest,
    session_id: str = Path(..., description="Registration session ID"),
    service: RegistrationService = Depends(get_registration_service)
):
    """
    **Step 4a: card payment**

    Card fields are only checked for presence. Creates the company
    (pending approval), its admin account and an order, and logs the admin in.
    """
    return service.pay_online(session_id, card)


@router.post("/{session_id}/pay-offline", response_model=PaymentResponse)
def pay_offline(
    request: Optional[PayOfflineRequest] = None,
    session_id: str = Path(..., description="Registration session ID"),
    service: RegistrationService = Depends(get_registration_service)
):
    """**Step 4b: offline payment**, verified later by a super-admin"""
    return service.pay_offline(session_id, request or PayOfflineRequest())
