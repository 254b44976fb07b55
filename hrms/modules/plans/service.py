# hrms/modules/plans/service.py
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrms.core.enums import AuditAction
from hrms.core.exceptions import DuplicateFieldError, NotFoundError, ValidationError
from hrms.shared.database.models import Plan
from hrms.shared.services.audit_service import AuditService
from .repository import PlansRepository
from .schemas import PlanCreate, PlanUpdate, PlanResponse

logger = logging.getLogger(__name__)


class PlansService:
    """Plan catalogue. Edits never touch companies: they keep their signup snapshot."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = PlansRepository(db)
        self.audit = AuditService(db)

    def get_active_plans(self) -> List[PlanResponse]:
        return [PlanResponse.model_validate(p) for p in self.repository.get_active_plans()]

    def get_all_plans(self) -> List[PlanResponse]:
        return [PlanResponse.model_validate(p) for p in self.repository.get_all_plans()]

    def get_plan_or_404(self, plan_id: str) -> Plan:
        plan = self.repository.get_plan_by_id(plan_id)
        if not plan:
            raise NotFoundError("Plan not found")
        return plan

    def get_plan(self, plan_id: str) -> PlanResponse:
        return PlanResponse.model_validate(self.get_plan_or_404(plan_id))

    def create_plan(self, plan_data: PlanCreate, created_by: str) -> PlanResponse:
        if self.repository.get_plan_by_name(plan_data.name):
            raise DuplicateFieldError("name", f"Plan '{plan_data.name}' already exists")

        plan = Plan(**plan_data.model_dump())
        try:
            self.repository.create_plan(plan)
            self.audit.record(
                AuditAction.PLAN_CREATED, "plan", plan.id,
                user_id=created_by, details={"name": plan.name, "price": plan.price}
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateFieldError("name", f"Plan '{plan_data.name}' already exists")

        self.db.refresh(plan)
        logger.info(f"Plan {plan.name} created by {created_by}")
        return PlanResponse.model_validate(plan)

    def update_plan(self, plan_id: str, plan_data: PlanUpdate, updated_by: str) -> PlanResponse:
        plan = self.get_plan_or_404(plan_id)

        update_data = plan_data.model_dump(exclude_unset=True)
        employees_included = update_data.get("employees_included", plan.employees_included)
        max_employees = update_data.get("max_employees", plan.max_employees)
        if employees_included > max_employees:
            raise ValidationError("employeesIncluded cannot exceed maxEmployees")

        for field, value in update_data.items():
            setattr(plan, field, value)

        self.audit.record(
            AuditAction.PLAN_UPDATED, "plan", plan.id,
            user_id=updated_by, details={"changes": sorted(update_data)}
        )
        self.db.commit()
        self.db.refresh(plan)
        return PlanResponse.model_validate(plan)

    def deactivate_plan(self, plan_id: str, deactivated_by: str) -> dict:
        """Soft delete: orders and companies keep referencing the row"""
        plan = self.get_plan_or_404(plan_id)
        plan.is_active = False
        self.audit.record(AuditAction.PLAN_DEACTIVATED, "plan", plan.id, user_id=deactivated_by)
        self.db.commit()
        return {"success": True}
