# hrms/core/auth/schemas.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from hrms.core.enums import UserRole
from hrms.shared.schemas.common import CamelModel


class SessionContext(BaseModel):
    """What a bearer token resolves to"""
    token_id: str
    user_id: str
    role: UserRole
    company_id: Optional[str] = None
    issued_at: datetime
    expires_at: datetime


class UserLogin(CamelModel):
    """Login body"""
    email: Optional[str] = Field(None, description="Account email")
    password: Optional[str] = Field(None, description="Account password")

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "admin@techsolutions.com",
                "password": "secret123"
            }
        }
    }


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    company_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    status: str


class TokenResponse(CamelModel):
    token: str
    user: UserResponse
    company_status: Optional[str] = None
