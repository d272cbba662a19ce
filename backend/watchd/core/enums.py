from enum import Enum, IntEnum


class MovieGenre(IntEnum):
    """TMDB Movie Genres - https://developer.themoviedb.org/reference/genre-movie-list"""
    ACTION = 28
    ADVENTURE = 12
    ANIMATION = 16
    COMEDY = 35
    CRIME = 80
    DOCUMENTARY = 99
    DRAMA = 18
    FAMILY = 10751
    FANTASY = 14
    HISTORY = 36
    HORROR = 27
    MUSIC = 10402
    MYSTERY = 9648
    ROMANCE = 10749
    SCIENCE_FICTION = 878
    TV_MOVIE = 10770
    THRILLER = 53
    WAR = 10752
    WESTERN = 37


class GenreHelper:
    """Genre lookups for list results that only carry genre ids"""

    @staticmethod
    def get_movie_genre_name(genre_id: int) -> str:
        try:
            return MovieGenre(genre_id).name.replace('_', ' ').title()
        except ValueError:
            return "Unknown"

    @staticmethod
    def get_movie_genre_names(genre_ids) -> list:
        return [GenreHelper.get_movie_genre_name(g) for g in genre_ids or []]


class StreamingService(IntEnum):
    """TMDB watch provider ids for the services a room can filter on"""
    NETFLIX = 8
    PRIME = 9
    DISNEY_PLUS = 337
    APPLE_TV = 2
    PARAMOUNT_PLUS = 531


# Filter-document service names as sent by clients
STREAMING_SERVICE_IDS = {
    "netflix": StreamingService.NETFLIX,
    "prime": StreamingService.PRIME,
    "disney+": StreamingService.DISNEY_PLUS,
    "apple-tv": StreamingService.APPLE_TV,
    "paramount+": StreamingService.PARAMOUNT_PLUS,
}


class ResultStatus(str, Enum):
    """Outcome of a core room operation"""
    OK = "ok"
    EXHAUSTED = "exhausted"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


class RoomEvent(str, Enum):
    """Event kinds published on a room channel"""
    JOINED = "joined"
    ERROR = "error"
    MATCH = "match"
    PARTNER_JOINED = "partner_joined"
    PARTNER_LEFT = "partner_left"
    ROOM_DISSOLVED = "room_dissolved"
    FILTERS_UPDATED = "filters_updated"


class StreamingHelper:
    """Streaming service lookups"""

    @staticmethod
    def get_provider_ids(service_names) -> list:
        """Translate service names to provider ids, dropping unknown names"""
        provider_ids = []
        for name in service_names or []:
            if not isinstance(name, str):
                continue
            provider_id = STREAMING_SERVICE_IDS.get(name.strip().lower())
            if provider_id is not None:
                provider_ids.append(int(provider_id))
        return provider_ids
