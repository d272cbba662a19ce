from pydantic import BaseModel
from typing import List, Optional


class Offer(BaseModel):
    monetization_type: str
    presentation_type: Optional[str] = None
    provider_name: Optional[str] = None
    icon_path: Optional[str] = None


class MovieCard(BaseModel):
    id: int
    title: str = ""
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    runtime: Optional[int] = None
    genres: List[str] = []
    streaming_options: List[Offer] = []


class FeedResponse(BaseModel):
    page: int
    movies: List[MovieCard]
    # Unseen candidates left in the room stack for the caller
    remaining: int
    exhausted: bool


class PopularMoviesResponse(BaseModel):
    page: int
    movies: List[MovieCard]
