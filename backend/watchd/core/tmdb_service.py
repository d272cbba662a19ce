import logging
from typing import Optional
from .interfaces import TMDBConfig, JustWatchConfig
from .tmdb_client import TMDBClient
from .justwatch_client import JustWatchClient
from .cache import CacheService
from .config import get_settings
from .exceptions import CatalogNotConfiguredException
from .services import MovieService

logger = logging.getLogger(__name__)

class TMDBServiceFactory:
    """Factory class for creating catalog and availability clients"""

    @staticmethod
    def create_movie_service(api_key: Optional[str] = None, language: Optional[str] = None,
                             region: Optional[str] = None) -> MovieService:
        """Create a new movie catalog service; an unset API key is a configuration error"""
        settings = get_settings()
        api_key = api_key or settings.TMDB_API_KEY
        if not api_key:
            logger.error("TMDB_API_KEY not configured")
            raise CatalogNotConfiguredException()

        config = TMDBConfig(
            api_key=api_key,
            language=language or settings.TMDB_LANGUAGE,
            region=region or settings.WATCH_REGION,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        )
        client = TMDBClient(config)

        cache = None
        if settings.REDIS_URL:
            cache = CacheService(settings.REDIS_URL)
        return MovieService(client, cache=cache, cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS,
                            watch_region=config.region)

    @staticmethod
    def create_justwatch_client() -> JustWatchClient:
        """Create a JustWatch GraphQL client from settings"""
        settings = get_settings()
        config = JustWatchConfig(
            url=settings.JUSTWATCH_URL,
            country=settings.JUSTWATCH_COUNTRY,
            language=settings.JUSTWATCH_LANGUAGE,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        )
        return JustWatchClient(config)
