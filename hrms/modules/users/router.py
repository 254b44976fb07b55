# hrms/modules/users/router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hrms.config.database import get_db
from hrms.core.auth.dependencies import CurrentUser, require_admin
from hrms.core.auth.schemas import UserResponse
from .service import UsersService
from .schemas import UserCreate

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    **Create an account**

    - Company admin: adds an employee to their own company
    - Super-admin: any role, any company

    Fails with `maxEmployees` / `requested` when the company is at its limit.
    """
    service = UsersService(db)
    return service.create_user(user_data, current_user)
