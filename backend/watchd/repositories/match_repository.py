import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from watchd.repositories.base_repository import BaseRepository
from watchd.models.room import Match

logger = logging.getLogger(__name__)

class MatchRepository(BaseRepository[Match]):
    """Repository for room matches"""

    def __init__(self, db: Session):
        super().__init__(Match, db)

    def get_for(self, room_id: int, movie_id: int) -> Optional[Match]:
        return self.filter_one_by(room_id=room_id, movie_id=movie_id)

    def insert_if_absent(self, room_id: int, movie_id: int) -> Optional[Match]:
        """Insert the (room, movie) match; None when another writer already holds it.

        The unique constraint on (room_id, movie_id) is the authority here: a
        caller that loses the race gets an IntegrityError, which is rolled back
        and reported as "not created by me".
        """
        try:
            return self.create({"room_id": room_id, "movie_id": movie_id, "watched": False})
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Match for room {room_id} movie {movie_id} already created by a concurrent swipe")
            return None

    def list_for_room(self, room_id: int) -> List[Match]:
        return (
            self.db.query(Match)
            .filter(Match.room_id == room_id)
            .order_by(Match.matched_at.desc(), Match.id.desc())
            .all()
        )
