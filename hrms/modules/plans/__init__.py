# hrms/modules/plans/__init__.py
"""
Plans module - subscription catalogue

- Public listing of active plans for the registration wizard
- Super-admin create / update / deactivate

Architecture:
- router.py: endpoints
- service.py: business rules
- repository.py: data access
- schemas.py: request/response models
"""

from .router import router
from .service import PlansService
from .repository import PlansRepository

__all__ = [
    "router",
    "PlansService",
    "PlansRepository"
]
