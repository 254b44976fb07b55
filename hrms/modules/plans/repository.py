# hrms/modules/plans/repository.py
from sqlalchemy.orm import Session
from typing import List, Optional

from hrms.shared.database.models import Plan


class PlansRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_active_plans(self) -> List[Plan]:
        return (
            self.db.query(Plan)
            .filter(Plan.is_active == True)  # noqa: E712
            .order_by(Plan.price, Plan.name)
            .all()
        )

    def get_all_plans(self) -> List[Plan]:
        return self.db.query(Plan).order_by(Plan.price, Plan.name).all()

    def get_plan_by_id(self, plan_id: str) -> Optional[Plan]:
        return self.db.query(Plan).filter(Plan.id == plan_id).first()

    def get_plan_by_name(self, name: str) -> Optional[Plan]:
        return self.db.query(Plan).filter(Plan.name == name).first()

    def create_plan(self, plan: Plan) -> Plan:
        self.db.add(plan)
        self.db.flush()
        return plan
