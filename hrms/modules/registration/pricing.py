# hrms/modules/registration/pricing.py
from typing import Any, Dict

from hrms.shared.database.models import Plan


def calculate_total_cost(
    price: int,
    employees_included: int,
    price_per_additional_employee: int,
    employee_count: int
) -> int:
    """
    Subscription amount in whole currency units.

    The base price covers `employees_included`; every employee beyond that
    adds `price_per_additional_employee`.
    """
    if employee_count <= employees_included:
        return price
    return price + (employee_count - employees_included) * price_per_additional_employee


def quote_plan(plan: Plan, employee_count: int) -> Dict[str, Any]:
    """Breakdown shown to the registrant before paying"""
    additional = max(employee_count - plan.employees_included, 0)
    return {
        "planId": plan.id,
        "basePrice": plan.price,
        "employeeCount": employee_count,
        "employeesIncluded": plan.employees_included,
        "additionalEmployees": additional,
        "pricePerAdditionalEmployee": plan.price_per_additional_employee,
        "totalCost": calculate_total_cost(
            plan.price,
            plan.employees_included,
            plan.price_per_additional_employee,
            employee_count,
        ),
    }
