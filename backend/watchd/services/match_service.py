import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from watchd.core.exceptions import MatchNotFoundException, NotRoomMemberException, RoomNotFoundException
from watchd.models.room import Match
from watchd.repositories.match_repository import MatchRepository
from watchd.repositories.room_repository import RoomRepository, RoomMemberRepository
from watchd.services.movie_service import MovieService

logger = logging.getLogger(__name__)


class MatchService:
    """Read side of a room's matches, plus the watched flag"""

    def __init__(self, db: Session, movie_service: Optional[MovieService] = None):
        self.db = db
        self.movie_service = movie_service
        self.room_repo = RoomRepository(db)
        self.member_repo = RoomMemberRepository(db)
        self.match_repo = MatchRepository(db)

    def _check_access(self, user_id: int, room_id: int) -> None:
        # Former members keep read access so archived rooms still show their matches
        if self.room_repo.get(room_id) is None:
            raise RoomNotFoundException()
        if self.member_repo.get_membership(room_id, user_id) is None:
            raise NotRoomMemberException()

    async def list_matches(self, user_id: int, room_id: int) -> List[Dict[str, Any]]:
        """Newest first, each with its movie card"""
        self._check_access(user_id, room_id)
        matches = self.match_repo.list_for_room(room_id)
        if not matches:
            return []

        cards = []
        if self.movie_service is not None:
            cards = await self.movie_service.enrich_many([m.movie_id for m in matches])

        results = []
        for index, match in enumerate(matches):
            item = self.to_dict(match)
            item["movie"] = cards[index] if cards else None
            results.append(item)
        return results

    def set_watched(self, user_id: int, room_id: int, match_id: int, watched: bool) -> Match:
        self._check_access(user_id, room_id)
        match = self.match_repo.get(match_id)
        if match is None or match.room_id != room_id:
            raise MatchNotFoundException()
        match = self.match_repo.update(match, {"watched": watched})
        logger.info(f"Match {match_id} in room {room_id} marked watched={watched}")
        return match

    @staticmethod
    def to_dict(match: Match) -> Dict[str, Any]:
        return {
            "id": match.id,
            "room_id": match.room_id,
            "movie_id": match.movie_id,
            "watched": match.watched,
            "matched_at": match.matched_at,
        }
