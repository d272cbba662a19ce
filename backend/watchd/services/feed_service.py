import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from watchd.core.enums import ResultStatus
from watchd.repositories.room_repository import RoomRepository, RoomMemberRepository, RoomStackRepository
from watchd.repositories.swipe_repository import SwipeRepository
from watchd.services.movie_service import MovieService

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


@dataclass
class FeedPage:
    status: ResultStatus
    page: int = 1
    movies: List[Dict[str, Any]] = field(default_factory=list)
    # Unseen candidates left in the whole stack for this user
    remaining: int = 0

    @property
    def exhausted(self) -> bool:
        return self.status == ResultStatus.EXHAUSTED


class FeedService:
    """Serves a room's stack to one member, page by page, minus what they already swiped"""

    def __init__(self, db: Session, movie_service: MovieService):
        self.db = db
        self.movie_service = movie_service
        self.room_repo = RoomRepository(db)
        self.member_repo = RoomMemberRepository(db)
        self.stack_repo = RoomStackRepository(db)
        self.swipe_repo = SwipeRepository(db)

    def get_unseen_movie_ids(self, user_id: int, room_id: int) -> List[int]:
        decided = self.swipe_repo.decided_movie_ids(user_id, room_id)
        return [movie_id for movie_id in self.stack_repo.get_movie_ids(room_id) if movie_id not in decided]

    async def get_page(self, user_id: int, room_id: int, page: int = 1) -> FeedPage:
        page = max(1, page)

        if self.room_repo.get(room_id) is None:
            return FeedPage(status=ResultStatus.NOT_FOUND, page=page)
        if not self.member_repo.is_active_member(room_id, user_id):
            return FeedPage(status=ResultStatus.FORBIDDEN, page=page)

        unseen = self.get_unseen_movie_ids(user_id, room_id)
        if not unseen:
            return FeedPage(status=ResultStatus.EXHAUSTED, page=page)

        start = (page - 1) * PAGE_SIZE
        page_ids = unseen[start:start + PAGE_SIZE]
        movies = await self.movie_service.enrich_many(page_ids) if page_ids else []

        logger.debug(f"Feed page {page} for user {user_id} room {room_id}: {len(movies)} of {len(unseen)} unseen")
        return FeedPage(status=ResultStatus.OK, page=page, movies=movies, remaining=len(unseen))
