# hrms/modules/companies/schemas.py
import re

from pydantic import EmailStr, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime

from hrms.core.enums import CompanyStatus
from hrms.shared.schemas.common import CamelModel

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]{1,61}[a-z0-9])$")
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CompanyResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    address: Optional[str] = None
    website: Optional[str] = None

    status: CompanyStatus
    plan_id: Optional[str] = None
    plan: str
    max_employees: int
    plan_snapshot: Optional[Dict[str, Any]] = None

    subdomain: Optional[str] = None
    subdomain_status: Optional[str] = None
    subdomain_requested_at: Optional[datetime] = None
    subdomain_rejection_reason: Optional[str] = None

    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyCreate(CamelModel):
    """Tenant provisioned directly by a super-admin"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=50)
    address: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    plan: Optional[str] = Field(None, description="Plan name; the default plan when omitted")
    status: CompanyStatus = CompanyStatus.ACTIVE
    max_employees: Optional[int] = Field(None, ge=1)
    admin_name: Optional[str] = Field(None, min_length=1, max_length=255)
    admin_password: Optional[str] = Field(
        None, min_length=6, description="When given, a company admin is created on the company email"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class CompanyAdminUpdate(CamelModel):
    """Super-admin patch"""
    status: Optional[CompanyStatus] = None
    plan: Optional[str] = Field(None, description="Plan name, e.g. professional")
    max_employees: Optional[int] = Field(None, ge=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "suspended",
                "plan": "professional",
                "maxEmployees": 100
            }
        }
    }


class CompanySettingsUpdate(CamelModel):
    """Company-admin editable profile and branding"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logo_url: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=50)
    website: Optional[str] = Field(None, max_length=255)
    primary_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    secondary_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class SubdomainRequestCreate(CamelModel):
    subdomain: str = Field(..., min_length=3, max_length=63)

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, v: str) -> str:
        v = v.strip().lower()
        if not SUBDOMAIN_PATTERN.match(v):
            raise ValueError(
                "Subdomain may only contain letters, numbers and hyphens, "
                "and cannot start or end with a hyphen"
            )
        return v
