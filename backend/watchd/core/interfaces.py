from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

@dataclass
class TMDBConfig:
    """Configuration class for TMDB API"""
    api_key: str
    base_url: str = "https://api.themoviedb.org/3"
    language: str = "de"
    region: str = "DE"  # watch_region for provider filters
    timeout: float = 5

@dataclass
class JustWatchConfig:
    """Configuration class for the JustWatch GraphQL API"""
    url: str = "https://apis.justwatch.com/graphql"
    country: str = "DE"
    language: str = "de"
    timeout: float = 5

class TMDBResponse:
    """Response wrapper for TMDB API calls"""
    def __init__(self, data: Dict, status_code: int, success: bool):
        self.data = data
        self.status_code = status_code
        self.success = success

class TMDBError(Exception):
    """Custom exception for TMDB API errors"""
    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class AvailabilityError(Exception):
    """Raised when a JustWatch request fails"""
    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class TMDBClientInterface(ABC):
    """Abstract interface for TMDB client"""

    @abstractmethod
    def make_request(self, endpoint: str, params: Dict = None) -> TMDBResponse:
        pass

class MovieServiceInterface(ABC):
    """Abstract interface for the movie catalog"""

    # Region sent with watch provider filters on discover
    watch_region: str = "DE"

    @abstractmethod
    def get_popular_movies(self, page: int = 1) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_details(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def discover_movies(self, page: int = 1, **filters) -> TMDBResponse:
        pass

    @abstractmethod
    def discover_movie_ids(self, page: int = 1, **filters) -> List[int]:
        pass

class AvailabilityClientInterface(ABC):
    """Abstract interface for streaming availability lookups"""

    @abstractmethod
    def find_node_id(self, title: str, release_year: int) -> Optional[str]:
        pass

    @abstractmethod
    def get_offers(self, node_id: str) -> List[Dict[str, Any]]:
        pass
