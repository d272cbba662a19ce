from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from watchd.models.favorite import Favorite
from watchd.repositories.favorite_repository import FavoriteRepository
from watchd.services.movie_service import MovieService


class FavoriteService:
    def __init__(self, db: Session, movie_service: Optional[MovieService] = None):
        self.db = db
        self.movie_service = movie_service
        self.favorite_repo = FavoriteRepository(db)

    def add(self, user_id: int, movie_id: int) -> Favorite:
        return self.favorite_repo.add(user_id, movie_id)

    def remove(self, user_id: int, movie_id: int) -> bool:
        return self.favorite_repo.remove(user_id, movie_id)

    async def list_favorites(self, user_id: int) -> List[Dict[str, Any]]:
        """Saved movies, most recent first, enriched when a movie service is available"""
        favorites = self.favorite_repo.list_for_user(user_id)
        cards = []
        if favorites and self.movie_service is not None:
            cards = await self.movie_service.enrich_many([f.movie_id for f in favorites])

        return [
            {
                "id": favorite.id,
                "movie_id": favorite.movie_id,
                "created_at": favorite.created_at,
                "movie": cards[index] if cards else None,
            }
            for index, favorite in enumerate(favorites)
        ]
