import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from watchd.core.enums import GenreHelper
from watchd.core.interfaces import MovieServiceInterface, TMDBError
from watchd.services.availability_service import AvailabilityCache

logger = logging.getLogger(__name__)


def release_year_of(release_date: Optional[str]) -> int:
    """Year part of a TMDB release date, current year when unknown"""
    if release_date and len(release_date) >= 4 and release_date[:4].isdigit():
        return int(release_date[:4])
    return datetime.now(timezone.utc).year


def placeholder_movie(movie_id: int) -> Dict[str, Any]:
    return {
        "id": movie_id,
        "title": "",
        "overview": "",
        "poster_path": None,
        "backdrop_path": None,
        "release_date": None,
        "vote_average": None,
        "runtime": None,
        "genres": [],
        "streaming_options": [],
    }


class MovieService:
    """Resolves movie metadata and streaming offers for API responses.

    Every lookup degrades on its own: missing metadata yields placeholder
    fields and missing offers an empty list, never a failed request.
    """

    def __init__(self, catalog: MovieServiceInterface, availability: AvailabilityCache):
        self.tmdb_movie_service = catalog
        self.availability = availability

    def get_movie_details(self, movie_id: int) -> Optional[Dict[str, Any]]:
        try:
            response = self.tmdb_movie_service.get_movie_details(movie_id)
        except TMDBError as e:
            logger.warning(f"Error fetching movie {movie_id}: {e.message}")
            return None
        if not response.success:
            logger.warning(f"TMDB returned {response.status_code} for movie {movie_id}")
            return None
        return response.data

    def get_offers_for(self, movie: Dict[str, Any]) -> List[Dict[str, Any]]:
        title = movie.get("title")
        if not title:
            return []
        return self.availability.get_offers(movie["id"], title, release_year_of(movie.get("release_date")))

    def enrich_movie(self, movie_id: int) -> Dict[str, Any]:
        """Full card for one movie id: metadata plus streaming offers"""
        card = placeholder_movie(movie_id)
        details = self.get_movie_details(movie_id)
        if details is None:
            return card

        card.update({
            "title": details.get("title") or "",
            "overview": details.get("overview") or "",
            "poster_path": details.get("poster_path"),
            "backdrop_path": details.get("backdrop_path"),
            "release_date": details.get("release_date"),
            "vote_average": details.get("vote_average"),
            "runtime": details.get("runtime"),
            "genres": [g.get("name") for g in details.get("genres") or [] if g.get("name")],
        })
        card["streaming_options"] = self.get_offers_for(card)
        return card

    @staticmethod
    def summary_card(movie: Dict[str, Any]) -> Dict[str, Any]:
        card = placeholder_movie(movie["id"])
        card.update({k: movie.get(k) for k in (
            "title", "overview", "poster_path", "backdrop_path", "release_date", "vote_average"
        )})
        card["title"] = card["title"] or ""
        card["genres"] = GenreHelper.get_movie_genre_names(movie.get("genre_ids"))
        return card

    def enrich_summary(self, movie: Dict[str, Any]) -> Dict[str, Any]:
        """Attach offers to a list-endpoint movie that already carries metadata"""
        card = self.summary_card(movie)
        card["streaming_options"] = self.get_offers_for(card)
        return card

    async def enrich_many(self, movie_ids: List[int]) -> List[Dict[str, Any]]:
        """Enrich ids concurrently, preserving input order"""
        loop = asyncio.get_running_loop()
        results = await asyncio.gather(
            *[loop.run_in_executor(None, self.enrich_movie, movie_id) for movie_id in movie_ids],
            return_exceptions=True,
        )
        cards = []
        for movie_id, result in zip(movie_ids, results):
            if isinstance(result, Exception):
                logger.error(f"Unexpected error enriching movie {movie_id}: {str(result)}")
                cards.append(placeholder_movie(movie_id))
            else:
                cards.append(result)
        return cards

    async def get_popular_movies(self, page: int = 1) -> List[Dict[str, Any]]:
        """Popular movies with an overview, each carrying its streaming offers"""
        try:
            response = self.tmdb_movie_service.get_popular_movies(page)
        except TMDBError as e:
            logger.error(f"Error fetching popular movies: {e.message}")
            return []
        if not response.success:
            return []

        movies = [
            m for m in response.data.get("results", [])
            if m.get("id") and (m.get("overview") or "").strip()
        ]
        loop = asyncio.get_running_loop()
        results = await asyncio.gather(
            *[loop.run_in_executor(None, self.enrich_summary, m) for m in movies],
            return_exceptions=True,
        )
        cards = []
        for movie, result in zip(movies, results):
            if isinstance(result, Exception):
                logger.error(f"Unexpected error enriching movie {movie['id']}: {str(result)}")
                result = self.summary_card(movie)
            cards.append(result)
        return cards
