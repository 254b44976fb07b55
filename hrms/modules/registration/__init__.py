# hrms/modules/registration/__init__.py
"""
Registration module - multi-step company signup

Steps:
1. start: company and admin details
2. select-plan
3. add-employees: employee count, bounded by the plan ceiling
4. pay-online / pay-offline: tenant created pending super-admin approval

Architecture:
- router.py: wizard endpoints (public)
- service.py: step ordering and tenant creation
- repository.py: session and uniqueness queries
- pricing.py: subscription amount
- schemas.py: request/response models
"""

from .router import router
from .service import RegistrationService
from .repository import RegistrationRepository
from .pricing import calculate_total_cost

__all__ = [
    "router",
    "RegistrationService",
    "RegistrationRepository",
    "calculate_total_cost"
]
