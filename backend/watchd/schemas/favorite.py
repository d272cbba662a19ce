from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from watchd.schemas.movie import MovieCard


class FavoriteCreate(BaseModel):
    movie_id: int = Field(gt=0)


class FavoriteResponse(BaseModel):
    id: int
    movie_id: int
    created_at: Optional[datetime] = None
    movie: Optional[MovieCard] = None

    class Config:
        from_attributes = True
