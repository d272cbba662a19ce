from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from watchd.db import get_db
from watchd.schemas.user import UserNameUpdate, UserResponse
from watchd.services.user_service import UserService
from watchd.core.auth import get_current_user
from watchd.core.exceptions import handle_exception

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/me", response_model=UserResponse)
def get_me(current_user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user_or_raise(current_user_id)
    except Exception as e:
        raise handle_exception(e)

@router.patch("/me", response_model=UserResponse)
def update_me(
    update_data: UserNameUpdate,
    current_user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the display name"""
    try:
        return UserService(db).update_name(current_user_id, update_data.name)
    except Exception as e:
        raise handle_exception(e)
