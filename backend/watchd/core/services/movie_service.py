from typing import List, Optional
from ..interfaces import MovieServiceInterface, TMDBResponse, TMDBClientInterface, TMDBError
from ..cache import CacheService

CACHE_TTL_24H = 24 * 60 * 60

class MovieService(MovieServiceInterface):
    """Service class for TMDB movie catalog operations"""

    def __init__(self, client: TMDBClientInterface, cache: Optional[CacheService] = None,
                 cache_ttl: int = CACHE_TTL_24H, watch_region: str = "DE"):
        self.client = client
        self.watch_region = watch_region
        self.cache = cache
        self.cache_ttl = cache_ttl

    def _cached_request(self, cache_key: str, endpoint: str, params: dict = None) -> TMDBResponse:
        if self.cache is not None:
            cached = self.cache.get_json(cache_key)
            if cached is not None:
                return TMDBResponse(cached, 200, True)
        resp = self.client.make_request(endpoint, params)
        if resp.success and self.cache is not None:
            self.cache.set_json(cache_key, resp.data, self.cache_ttl)
        return resp

    def get_popular_movies(self, page: int = 1) -> TMDBResponse:
        """Get popular movies"""
        return self._cached_request(f"tmdb:movie:popular:p{page}", "movie/popular", {"page": page})

    def get_movie_details(self, movie_id: int) -> TMDBResponse:
        """Get movie details by ID"""
        return self._cached_request(f"tmdb:movie:{movie_id}:details", f"movie/{movie_id}")

    def discover_movies(self, page: int = 1, **filters) -> TMDBResponse:
        """Discover movies with filters, most popular first"""
        params = {"sort_by": "popularity.desc", "page": page}
        params.update(filters)
        return self.client.make_request("discover/movie", params)

    def discover_movie_ids(self, page: int = 1, **filters) -> List[int]:
        """Return the movie ids of one discover page, or raise on failure"""
        resp = self.discover_movies(page, **filters)
        if not resp.success:
            raise TMDBError(f"Discover request failed for page {page}", resp.status_code)
        return [movie["id"] for movie in resp.data.get("results", []) if "id" in movie]
