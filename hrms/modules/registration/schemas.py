# hrms/modules/registration/schemas.py
from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from hrms.core.auth.schemas import UserResponse
from hrms.core.enums import RegistrationStep
from hrms.shared.schemas.common import BaseResponse, CamelModel


class CompanyAdminDetails(CamelModel):
    """Company and admin identity shared by the wizard and the one-call signup"""
    company_name: str = Field(..., min_length=1, max_length=255)
    admin_first_name: str = Field(..., min_length=1, max_length=100)
    admin_last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=10, max_length=50, description="Valid phone number")
    gender: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")

    @field_validator("company_name", "admin_first_name", "admin_last_name", "phone", "gender")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegistrationStart(CompanyAdminDetails):
    """Step 1: company and admin details"""
    confirm_password: str
    accept_terms: bool = False

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.accept_terms:
            raise ValueError("Terms and conditions must be accepted")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "companyName": "Acme",
                "adminFirstName": "Ada",
                "adminLastName": "Lovelace",
                "phone": "9876543210",
                "gender": "female",
                "email": "a@acme.com",
                "password": "secret123",
                "confirmPassword": "secret123",
                "acceptTerms": True
            }
        }
    }


class RegistrationStartResponse(CamelModel):
    session_id: str


class SelectPlanRequest(CamelModel):
    """Step 2"""
    plan_id: str = Field(..., min_length=1)


class EmployeeDraft(CamelModel):
    """Employee listed during signup. Passwords are never accepted from the client."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AddEmployeesRequest(CamelModel):
    """Step 3"""
    employees: List[EmployeeDraft] = Field(default_factory=list)
    employee_count: Optional[int] = Field(None, ge=1)


class PayOnlineRequest(CamelModel):
    """Step 4, online: presence of every card field is all that is checked"""
    card_number: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cvv: Optional[str] = None

    @field_validator("card_number", "expiry_month", "expiry_year", "cvv", mode="before")
    @classmethod
    def as_text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v).strip()

    def is_complete(self) -> bool:
        return all([self.card_number, self.expiry_month, self.expiry_year, self.cvv])


class PayOfflineRequest(CamelModel):
    """Step 4, offline"""
    notes: Optional[str] = Field(None, max_length=2000)


class RegistrationSessionResponse(CamelModel):
    id: str
    step: RegistrationStep
    company_name: Optional[str] = None
    email: str
    plan_id: Optional[str] = None
    employee_count: Optional[int] = None
    employees: List[Dict[str, Any]] = Field(default_factory=list)
    quote: Optional[Dict[str, Any]] = None
    company_id: Optional[str] = None
    expires_at: datetime


class RegistrationStepResponse(BaseResponse):
    session: RegistrationSessionResponse


class CompanySummary(CamelModel):
    id: str
    name: str
    status: str


class PaymentResponse(BaseResponse):
    order_id: Optional[str] = None
    offline_request_id: Optional[str] = None
    amount: int
    currency: str
    token: str
    user: UserResponse
    company: CompanySummary


class CompanyRegistration(CompanyAdminDetails):
    """One-call signup: company and admin created at once, pending approval"""
    plan_id: Optional[str] = Field(None, description="Defaults to the basic plan")


class RegisterResponse(CamelModel):
    token: str
    user: UserResponse
    company: CompanySummary
