# hrms/modules/companies/__init__.py
"""
Companies module - tenant profile, status and subdomain requests

Architecture:
- router.py: company endpoints, tenant-scoped
- service.py: direct provisioning, updates and subdomain requests
- repository.py: queries
- schemas.py: request/response models
"""

from .router import router
from .service import CompaniesService
from .repository import CompaniesRepository

__all__ = [
    "router",
    "CompaniesService",
    "CompaniesRepository"
]
