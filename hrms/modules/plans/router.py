# hrms/modules/plans/router.py
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List

from hrms.config.database import get_db
from hrms.core.auth.dependencies import CurrentUser, require_auth, require_super_admin
from .service import PlansService
from .schemas import PlanCreate, PlanUpdate, PlanResponse

router = APIRouter()


@router.get("", response_model=List[PlanResponse])
def get_active_plans(db: Session = Depends(get_db)):
    """Active plans, public: the registration wizard lists them"""
    service = PlansService(db)
    return service.get_active_plans()


# Declared before /{plan_id} so "all" is not taken for an id
@router.get("/all", response_model=List[PlanResponse])
def get_all_plans(
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Every plan including inactive ones. Super-admin only."""
    service = PlansService(db)
    return service.get_all_plans()


@router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(
    plan_id: str = Path(..., description="Plan ID"),
    current_user: CurrentUser = Depends(require_auth),
    db: Session = Depends(get_db)
):
    service = PlansService(db)
    return service.get_plan(plan_id)


@router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    plan_data: PlanCreate,
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    service = PlansService(db)
    return service.create_plan(plan_data, current_user.id)


@router.patch("/{plan_id}", response_model=PlanResponse)
def update_plan(
    plan_data: PlanUpdate,
    plan_id: str = Path(..., description="Plan ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """
    Update a plan.

    Companies already signed up keep the entitlements captured in their
    plan snapshot; only new registrations see the change.
    """
    service = PlansService(db)
    return service.update_plan(plan_id, plan_data, current_user.id)


@router.delete("/{plan_id}")
def delete_plan(
    plan_id: str = Path(..., description="Plan ID"),
    current_user: CurrentUser = Depends(require_super_admin),
    db: Session = Depends(get_db)
):
    """Deactivates the plan; it disappears from registration"""
    service = PlansService(db)
    return service.deactivate_plan(plan_id, current_user.id)
