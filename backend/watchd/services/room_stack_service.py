import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from watchd.core.enums import StreamingHelper
from watchd.core.exceptions import CatalogNotConfiguredException
from watchd.core.interfaces import TMDBError
from watchd.core.services import MovieService as CatalogMovieService
from watchd.repositories.room_repository import RoomStackRepository

logger = logging.getLogger(__name__)

STACK_PAGE_COUNT = 5


@dataclass
class StackBuildResult:
    room_id: int
    movie_count: int
    pages_fetched: int

    @property
    def complete(self) -> bool:
        return self.pages_fetched == STACK_PAGE_COUNT


def build_discover_params(filters: Optional[Dict[str, Any]], watch_region: str = "DE") -> Dict[str, Any]:
    """Translate a room filter document into TMDB discover query parameters.

    Only the documented keys are read; anything else in the document is ignored.
    """
    filters = filters or {}
    params: Dict[str, Any] = {}

    genres = filters.get("genres")
    if genres:
        params["with_genres"] = ",".join(str(g) for g in genres)

    year_from = filters.get("yearFrom")
    if year_from:
        params["primary_release_date.gte"] = f"{int(year_from)}-01-01"

    min_rating = filters.get("minRating")
    if min_rating:
        params["vote_average.gte"] = str(min_rating)

    max_runtime = filters.get("maxRuntime")
    if max_runtime:
        params["with_runtime.lte"] = str(max_runtime)

    language = filters.get("language")
    if language:
        params["with_original_language"] = language

    provider_ids = StreamingHelper.get_provider_ids(filters.get("streamingServices"))
    if provider_ids:
        # "|" is TMDB's OR operator
        params["with_watch_providers"] = "|".join(str(p) for p in provider_ids)
        params["watch_region"] = watch_region

    return params


class RoomStackService:
    """Builds the shared, ordered candidate list for a room"""

    def __init__(self, db: Session, catalog: Optional[CatalogMovieService]):
        self.db = db
        self.catalog = catalog
        self.stack_repo = RoomStackRepository(db)

    def build_stack(self, room_id: int, filters: Optional[Dict[str, Any]]) -> StackBuildResult:
        """Replace the room's stack with the first discover pages for ``filters``.

        A failing page ends the fetch loop; whatever was collected before it is
        still persisted. A missing catalog configuration is raised to the caller.
        """
        if self.catalog is None:
            raise CatalogNotConfiguredException()

        params = build_discover_params(filters, self.catalog.watch_region)
        movie_ids: List[int] = []
        pages_fetched = 0

        for page in range(1, STACK_PAGE_COUNT + 1):
            try:
                page_ids = self.catalog.discover_movie_ids(page, **params)
            except TMDBError as e:
                logger.error(f"TMDB request failed for room {room_id} stack page {page}: {e.message}")
                break
            movie_ids.extend(page_ids)
            pages_fetched += 1

        self.stack_repo.replace(room_id, movie_ids)

        if not movie_ids:
            logger.warning(f"No movies found for room {room_id} stack with filters {filters}")
        else:
            logger.info(f"Room {room_id} stack generated with {len(movie_ids)} movies")

        return StackBuildResult(room_id=room_id, movie_count=len(movie_ids), pages_fetched=pages_fetched)

    def get_stack(self, room_id: int) -> List[int]:
        return self.stack_repo.get_movie_ids(room_id)
