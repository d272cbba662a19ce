import logging
import threading
from typing import Optional

from fastapi import Depends, HTTPException

from watchd.core.config import get_settings
from watchd.core.exceptions import CatalogNotConfiguredException
from watchd.core.services import MovieService as CatalogMovieService
from watchd.core.tmdb_service import TMDBServiceFactory
from watchd.services.availability_service import AvailabilityCache
from watchd.services.movie_service import MovieService
from watchd.services.notification_service import ConnectionManager, manager

logger = logging.getLogger(__name__)

_availability_cache: Optional[AvailabilityCache] = None
_availability_lock = threading.Lock()


def get_availability_cache() -> AvailabilityCache:
    """Process-wide availability cache, created on first use"""
    global _availability_cache
    if _availability_cache is None:
        with _availability_lock:
            if _availability_cache is None:
                _availability_cache = AvailabilityCache(
                    TMDBServiceFactory.create_justwatch_client(),
                    ttl_seconds=get_settings().AVAILABILITY_CACHE_TTL_SECONDS,
                )
    return _availability_cache


def get_catalog() -> CatalogMovieService:
    try:
        return TMDBServiceFactory.create_movie_service()
    except CatalogNotConfiguredException as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


def get_optional_catalog() -> Optional[CatalogMovieService]:
    """Catalog for endpoints that still answer without one (metadata left empty)"""
    try:
        return TMDBServiceFactory.create_movie_service()
    except CatalogNotConfiguredException:
        return None


def get_movie_service(
    catalog: CatalogMovieService = Depends(get_catalog),
    availability: AvailabilityCache = Depends(get_availability_cache),
) -> MovieService:
    return MovieService(catalog, availability)


def get_optional_movie_service(
    catalog: Optional[CatalogMovieService] = Depends(get_optional_catalog),
    availability: AvailabilityCache = Depends(get_availability_cache),
) -> Optional[MovieService]:
    if catalog is None:
        return None
    return MovieService(catalog, availability)


def get_notifier() -> ConnectionManager:
    return manager
