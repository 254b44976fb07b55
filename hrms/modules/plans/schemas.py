# hrms/modules/plans/schemas.py
from pydantic import Field, model_validator
from typing import List, Optional
from datetime import datetime

from hrms.shared.schemas.common import CamelModel


class PlanCreate(CamelModel):
    """Schema to create a subscription plan"""
    name: str = Field(..., min_length=2, max_length=100, description="Internal name, e.g. basic")
    display_name: str = Field(..., min_length=2, max_length=255)
    duration: int = Field(1, ge=1, description="Duration in months")
    price: int = Field(0, ge=0, description="Base price in whole currency units")
    max_employees: int = Field(50, ge=1, description="Hard employee ceiling")
    employees_included: int = Field(10, ge=0, description="Employees covered by the base price")
    price_per_additional_employee: int = Field(0, ge=0)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True

    @model_validator(mode="after")
    def check_limits(self):
        if self.employees_included > self.max_employees:
            raise ValueError("employeesIncluded cannot exceed maxEmployees")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "basic",
                "displayName": "Basic Plan",
                "duration": 1,
                "price": 5000,
                "maxEmployees": 50,
                "employeesIncluded": 10,
                "pricePerAdditionalEmployee": 50,
                "features": ["attendance", "leave"]
            }
        }
    }


class PlanUpdate(CamelModel):
    """All fields optional; only the provided ones change"""
    display_name: Optional[str] = Field(None, min_length=2, max_length=255)
    duration: Optional[int] = Field(None, ge=1)
    price: Optional[int] = Field(None, ge=0)
    max_employees: Optional[int] = Field(None, ge=1)
    employees_included: Optional[int] = Field(None, ge=0)
    price_per_additional_employee: Optional[int] = Field(None, ge=0)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PlanResponse(CamelModel):
    id: str
    name: str
    display_name: str
    duration: int
    price: int
    max_employees: int
    employees_included: int
    price_per_additional_employee: int
    features: List[str]
    is_active: bool
    created_at: Optional[datetime] = None
