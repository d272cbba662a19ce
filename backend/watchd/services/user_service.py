import logging
import random
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from watchd.core.auth import get_password_hash, verify_password
from watchd.core.exceptions import (
    GuestUpgradeException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
    UserNotFoundException,
)
from watchd.models.user import User
from watchd.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

GUEST_ADJECTIVES = [
    "Roter", "Blauer", "Grüner", "Gelber", "Mutiger",
    "Schneller", "Kluger", "Flinker", "Starker", "Wilder",
]
GUEST_ANIMALS = [
    "Panda", "Tiger", "Fuchs", "Wolf", "Bär",
    "Adler", "Falke", "Löwe", "Gepard", "Delfin",
]


def generate_guest_name() -> str:
    return f"{random.choice(GUEST_ADJECTIVES)} {random.choice(GUEST_ANIMALS)}"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Accounts: registered users and throwaway guests"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repository = UserRepository(db)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.user_repository.get(user_id)

    def get_user_or_raise(self, user_id: int) -> User:
        user = self.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundException()
        return user

    def register(self, name: str, email: str, password: str) -> User:
        """Create a registered account"""
        email = normalize_email(email)
        if self.user_repository.email_exists(email):
            raise UserAlreadyExistsException()

        try:
            user = self.user_repository.create_user(
                name=name.strip(),
                email=email,
                password_hash=get_password_hash(password),
                is_guest=False,
            )
        except IntegrityError:
            self.db.rollback()
            raise UserAlreadyExistsException()

        logger.info(f"User registered with ID: {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.user_repository.get_by_email(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsException()
        return user

    def create_guest(self, name: Optional[str] = None) -> User:
        name = (name or "").strip() or generate_guest_name()
        user = self.user_repository.create_user(name=name, is_guest=True)
        logger.info(f"Guest user created with ID: {user.id}")
        return user

    def upgrade_guest(self, user_id: int, email: str, password: str, name: Optional[str] = None) -> User:
        """Attach credentials to a guest account, keeping its rooms and swipes."""
        user = self.get_user_or_raise(user_id)
        if not user.is_guest:
            raise GuestUpgradeException()

        email = normalize_email(email)
        if self.user_repository.email_exists(email):
            raise UserAlreadyExistsException()

        fields = {
            "email": email,
            "password_hash": get_password_hash(password),
            "is_guest": False,
        }
        if name and name.strip():
            fields["name"] = name.strip()

        try:
            user = self.user_repository.update_user_fields(user, fields)
        except IntegrityError:
            self.db.rollback()
            raise UserAlreadyExistsException()

        logger.info(f"Guest {user.id} upgraded to a registered account")
        return user

    def update_name(self, user_id: int, name: str) -> User:
        user = self.get_user_or_raise(user_id)
        return self.user_repository.update_user_fields(user, {"name": name.strip()})
