import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from watchd.core.enums import ResultStatus
from watchd.models.room import Match, Swipe, SwipeDirection
from watchd.repositories.match_repository import MatchRepository
from watchd.repositories.room_repository import RoomRepository, RoomMemberRepository
from watchd.repositories.swipe_repository import SwipeRepository
from watchd.services.movie_service import MovieService

logger = logging.getLogger(__name__)

# Rooms whose only member ever was the creator never match
MIN_MEMBERS_FOR_MATCH = 2


@dataclass
class MatchResult:
    is_match: bool
    match_id: Optional[int] = None
    movie_id: Optional[int] = None
    movie_title: str = ""
    poster_path: Optional[str] = None
    streaming_options: List[Dict[str, Any]] = field(default_factory=list)

    def to_event_payload(self) -> Dict[str, Any]:
        return {
            "movie_id": self.movie_id,
            "movie_title": self.movie_title,
            "poster_path": self.poster_path,
            "streaming_options": self.streaming_options,
        }


@dataclass
class SwipeResult:
    status: ResultStatus
    swipe: Optional[Swipe] = None
    match: Optional[MatchResult] = None


class SwipeService:
    """Swipe ledger plus match detection for a room"""

    def __init__(self, db: Session, movie_service: Optional[MovieService] = None):
        self.db = db
        self.movie_service = movie_service
        self.room_repo = RoomRepository(db)
        self.member_repo = RoomMemberRepository(db)
        self.swipe_repo = SwipeRepository(db)
        self.match_repo = MatchRepository(db)

    async def record_swipe(
        self, user_id: int, movie_id: int, room_id: int, direction: SwipeDirection
    ) -> SwipeResult:
        """Upsert the user's decision and, on a right swipe, check the room for a match."""
        room = self.room_repo.get(room_id)
        if room is None:
            return SwipeResult(status=ResultStatus.NOT_FOUND)
        if not self.member_repo.is_active_member(room_id, user_id):
            return SwipeResult(status=ResultStatus.FORBIDDEN)

        swipe = self.swipe_repo.upsert(user_id, movie_id, room_id, direction)
        self.room_repo.touch(room)

        match_result = None
        if direction == SwipeDirection.RIGHT:
            match = self.detect_match(room_id, movie_id)
            if match is not None:
                match_result = await self.describe_match(match)

        return SwipeResult(status=ResultStatus.OK, swipe=swipe, match=match_result)

    def detect_match(self, room_id: int, movie_id: int) -> Optional[Match]:
        """Create the (room, movie) match when every member who ever joined swiped right.

        Members who left still count, so a match needs their earlier right
        swipe too. Returns the new match, or None when the room is not
        eligible or the match already exists (including when a concurrent
        swipe won the insert).
        """
        member_count = self.member_repo.count_members(room_id)
        if member_count < MIN_MEMBERS_FOR_MATCH:
            return None

        right_swipers = self.swipe_repo.count_right_swipers(movie_id, room_id)
        if right_swipers < member_count:
            return None

        if self.match_repo.get_for(room_id, movie_id) is not None:
            return None

        match = self.match_repo.insert_if_absent(room_id, movie_id)
        if match is not None:
            logger.info(f"Match created in room {room_id} for movie {movie_id}")
        return match

    async def describe_match(self, match: Match) -> MatchResult:
        """Notification payload for a new match; metadata is best effort"""
        result = MatchResult(is_match=True, match_id=match.id, movie_id=match.movie_id)
        if self.movie_service is None:
            return result

        loop = asyncio.get_running_loop()
        try:
            card = await loop.run_in_executor(None, self.movie_service.enrich_movie, match.movie_id)
        except Exception as e:
            logger.error(f"Could not load details for matched movie {match.movie_id}: {str(e)}")
            return result

        result.movie_title = card.get("title") or ""
        result.poster_path = card.get("poster_path")
        result.streaming_options = card.get("streaming_options") or []
        return result
