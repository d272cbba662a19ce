import logging
from datetime import datetime, timezone
from typing import Optional, Set
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from watchd.repositories.base_repository import BaseRepository
from watchd.models.room import Swipe, SwipeDirection

logger = logging.getLogger(__name__)

class SwipeRepository(BaseRepository[Swipe]):
    """Repository for the swipe ledger"""

    def __init__(self, db: Session):
        super().__init__(Swipe, db)

    def get_swipe(self, user_id: int, movie_id: int, room_id: int) -> Optional[Swipe]:
        return self.filter_one_by(user_id=user_id, movie_id=movie_id, room_id=room_id)

    def upsert(self, user_id: int, movie_id: int, room_id: int, direction: SwipeDirection) -> Swipe:
        """Record the user's decision; a resubmission overwrites direction and timestamp"""
        existing = self.get_swipe(user_id, movie_id, room_id)
        if existing:
            return self._overwrite(existing, direction)

        try:
            return self.create({
                "user_id": user_id,
                "movie_id": movie_id,
                "room_id": room_id,
                "direction": direction,
                "swiped_at": datetime.now(timezone.utc),
            })
        except IntegrityError:
            # A concurrent request inserted the same (user, movie, room) row first
            self.db.rollback()
            logger.info(f"Swipe insert race for user {user_id} movie {movie_id} room {room_id}, updating")
            existing = self.get_swipe(user_id, movie_id, room_id)
            if existing is None:
                raise
            return self._overwrite(existing, direction)

    def _overwrite(self, swipe: Swipe, direction: SwipeDirection) -> Swipe:
        return self.update(swipe, {"direction": direction, "swiped_at": datetime.now(timezone.utc)})

    def decided_movie_ids(self, user_id: int, room_id: int) -> Set[int]:
        """Every movie the user swiped in the room, either direction"""
        rows = (
            self.db.query(Swipe.movie_id)
            .filter(Swipe.user_id == user_id, Swipe.room_id == room_id)
            .all()
        )
        return {row[0] for row in rows}

    def count_right_swipers(self, movie_id: int, room_id: int) -> int:
        """Distinct users whose current decision on the movie is right"""
        return (
            self.db.query(func.count(func.distinct(Swipe.user_id)))
            .filter(
                Swipe.movie_id == movie_id,
                Swipe.room_id == room_id,
                Swipe.direction == SwipeDirection.RIGHT,
            )
            .scalar()
        ) or 0
