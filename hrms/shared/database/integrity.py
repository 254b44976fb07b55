# hrms/shared/database/integrity.py
from typing import Optional

from sqlalchemy.exc import IntegrityError

# Unique index name (PostgreSQL) and table.column (SQLite) -> field reported to the client
UNIQUE_FIELDS = {
    "uq_users_email": "email",
    "users.email": "email",
    "uq_companies_email": "email",
    "companies.email": "email",
    "uq_companies_phone": "phone",
    "companies.phone": "phone",
    "uq_companies_subdomain": "subdomain",
    "companies.subdomain": "subdomain",
    "uq_registration_sessions_live_email": "email",
    "registration_sessions.email": "email",
    "uq_registration_sessions_live_phone": "phone",
    "registration_sessions.phone": "phone",
    "uq_plans_name": "name",
    "plans.name": "name",
}


def duplicate_field_from(error: IntegrityError) -> Optional[str]:
    """Which unique field an IntegrityError violated, if it was a uniqueness error"""
    message = str(error.orig)
    for marker, field in UNIQUE_FIELDS.items():
        if marker in message:
            return field
    return None
