from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from watchd.schemas.movie import MovieCard


class MatchResponse(BaseModel):
    id: int
    room_id: int
    movie_id: int
    watched: bool
    matched_at: Optional[datetime] = None
    movie: Optional[MovieCard] = None

    class Config:
        from_attributes = True


class WatchedUpdate(BaseModel):
    watched: bool
