# hrms/shared/database/maintenance.py
import logging
from datetime import datetime
from typing import Dict

from sqlalchemy.orm import Session

from hrms.config.database import Base, engine
from hrms.config.settings import settings
from hrms.core.auth.service import AuthService
from hrms.core.auth.session_store import build_session_store
from hrms.core.enums import UserRole, UserStatus
from hrms.modules.registration.repository import RegistrationRepository
from hrms.shared.database.models import Plan, User

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    {
        "name": "basic",
        "display_name": "Basic",
        "duration": 1,
        "price": 5000,
        "max_employees": 50,
        "employees_included": 50,
        "price_per_additional_employee": 0,
        "features": ["employees", "attendance", "leave"],
    },
    {
        "name": "professional",
        "display_name": "Professional",
        "duration": 1,
        "price": 15000,
        "max_employees": 200,
        "employees_included": 100,
        "price_per_additional_employee": 80,
        "features": ["employees", "attendance", "leave", "payroll", "reports"],
    },
    {
        "name": "enterprise",
        "display_name": "Enterprise",
        "duration": 12,
        "price": 400000,
        "max_employees": 1000,
        "employees_included": 500,
        "price_per_additional_employee": 50,
        "features": [
            "employees", "attendance", "leave", "payroll", "reports",
            "custom_subdomain", "priority_support"
        ],
    },
]


def create_tables() -> None:
    Base.metadata.create_all(bind=engine)


def seed_database(db: Session) -> Dict[str, int]:
    """Super-admin account and default plans. Existing rows are left alone."""
    created = {"superadmin": 0, "plans": 0}

    email = settings.superadmin_email.lower()
    if not db.query(User).filter(User.email == email).first():
        db.add(User(
            email=email,
            password=AuthService.get_password_hash(settings.superadmin_password),
            name=settings.superadmin_name,
            role=UserRole.SUPER_ADMIN.value,
            company_id=None,
            status=UserStatus.ACTIVE.value,
        ))
        created["superadmin"] = 1
        logger.info(f"Super-admin {email} created")

    for plan_data in DEFAULT_PLANS:
        if not db.query(Plan).filter(Plan.name == plan_data["name"]).first():
            db.add(Plan(**plan_data))
            created["plans"] += 1
            logger.info(f"Plan {plan_data['name']} created")

    db.commit()
    return created


def purge_expired(db: Session) -> Dict[str, int]:
    """Drop abandoned registration sessions and expired login sessions"""
    now = datetime.utcnow()
    registrations = RegistrationRepository(db).purge_expired_sessions(now)
    db.commit()

    auth_sessions = build_session_store(db).purge_expired(now)

    if registrations or auth_sessions:
        logger.info(
            f"Purged {registrations} registration sessions and {auth_sessions} auth sessions"
        )
    return {"registration_sessions": registrations, "auth_sessions": auth_sessions}
