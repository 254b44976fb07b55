# hrms/modules/users/__init__.py
"""Users module - account creation bounded by the company's plan"""

from .router import router
from .service import UsersService

__all__ = ["router", "UsersService"]
