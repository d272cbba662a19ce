from .movie_service import MovieService

__all__ = ["MovieService"]
