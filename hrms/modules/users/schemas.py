# hrms/modules/users/schemas.py
from pydantic import EmailStr, Field, field_validator
from typing import Optional

from hrms.core.enums import UserRole, UserStatus
from hrms.shared.schemas.common import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.EMPLOYEE
    company_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@acme.example",
                "password": "secret123",
                "name": "Jane Doe",
                "department": "Engineering",
                "position": "Developer"
            }
        }
    }
