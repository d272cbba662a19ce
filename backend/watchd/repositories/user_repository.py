from typing import Optional
from sqlalchemy.orm import Session
from watchd.repositories.base_repository import BaseRepository
from watchd.models.user import User

class UserRepository(BaseRepository[User]):
    """User repository with user-specific operations"""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.filter_one_by(email=email)

    def email_exists(self, email: str) -> bool:
        """Check if email exists"""
        return self.exists(email=email)

    def create_user(self, name: str, email: Optional[str] = None, password_hash: Optional[str] = None,
                    is_guest: bool = False) -> User:
        """Create new user"""
        return self.create({
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "is_guest": is_guest,
        })

    def update_user_fields(self, user: User, fields: dict) -> User:
        """Update user with given fields"""
        return self.update(user, fields)
