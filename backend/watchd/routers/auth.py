from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from watchd.db import get_db
from watchd.schemas.user import UserCreate, UserLogin, GuestCreate, GuestUpgrade, UserResponse, Token
from watchd.services.user_service import UserService
from watchd.core.auth import create_user_token, get_current_user
from watchd.core.exceptions import handle_exception

router = APIRouter(prefix="/auth", tags=["authentication"])

def _token_response(user) -> Token:
    return Token(access_token=create_user_token(user), user=UserResponse.model_validate(user))

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and log them in"""
    try:
        user_service = UserService(db)
        user = user_service.register(user_data.name, user_data.email, user_data.password)
        return _token_response(user)
    except Exception as e:
        raise handle_exception(e)

@router.post("/login", response_model=Token)
def login(user_credentials: UserLogin, db: Session = Depends(get_db)):
    try:
        user_service = UserService(db)
        user = user_service.authenticate(user_credentials.email, user_credentials.password)
        return _token_response(user)
    except Exception as e:
        raise handle_exception(e)

@router.post("/guest", response_model=Token, status_code=status.HTTP_201_CREATED)
def create_guest(guest_data: Optional[GuestCreate] = None, db: Session = Depends(get_db)):
    """Create a throwaway account with a generated name"""
    try:
        user_service = UserService(db)
        user = user_service.create_guest(guest_data.name if guest_data else None)
        return _token_response(user)
    except Exception as e:
        raise handle_exception(e)

@router.post("/upgrade", response_model=Token)
def upgrade_guest(
    upgrade_data: GuestUpgrade,
    current_user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Turn the current guest account into a registered one; a fresh token is issued"""
    try:
        user_service = UserService(db)
        user = user_service.upgrade_guest(
            current_user_id, upgrade_data.email, upgrade_data.password, upgrade_data.name
        )
        return _token_response(user)
    except Exception as e:
        raise handle_exception(e)
