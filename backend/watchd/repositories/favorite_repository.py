from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from watchd.repositories.base_repository import BaseRepository
from watchd.models.favorite import Favorite

class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for a user's saved movies"""

    def __init__(self, db: Session):
        super().__init__(Favorite, db)

    def add(self, user_id: int, movie_id: int) -> Favorite:
        existing = self.filter_one_by(user_id=user_id, movie_id=movie_id)
        if existing:
            return existing
        try:
            return self.create({"user_id": user_id, "movie_id": movie_id})
        except IntegrityError:
            self.db.rollback()
            return self.filter_one_by(user_id=user_id, movie_id=movie_id)

    def remove(self, user_id: int, movie_id: int) -> bool:
        existing = self.filter_one_by(user_id=user_id, movie_id=movie_id)
        if not existing:
            return False
        self.delete_obj(existing)
        return True

    def list_for_user(self, user_id: int) -> List[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )
