# hrms/modules/superadmin/__init__.py
"""
Superadmin module - platform administration

- Approve / reject online orders and offline payment requests
  (activates or rejects the pending company)
- Approve / reject subdomain requests
- Platform metrics
- Audit trail

Architecture:
- router.py: super-admin only endpoints
- service.py: compare-and-set decisions, one transaction each
- repository.py: conditional updates and metrics queries
- schemas.py: request/response models

Security:
- Only accessible to SUPER_ADMIN
- Every decision is written to the audit log
"""

from .router import router
from .service import SuperadminService
from .repository import SuperadminRepository

__all__ = [
    "router",
    "SuperadminService",
    "SuperadminRepository"
]
