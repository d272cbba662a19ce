from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from watchd.models.room import SwipeDirection
from watchd.schemas.movie import Offer


class SwipeCreate(BaseModel):
    movie_id: int = Field(gt=0)
    room_id: int = Field(gt=0)
    direction: SwipeDirection


class SwipeRecord(BaseModel):
    id: int
    user_id: int
    movie_id: int
    room_id: int
    direction: SwipeDirection
    swiped_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MatchEvent(BaseModel):
    movie_id: int
    movie_title: str = ""
    poster_path: Optional[str] = None
    streaming_options: List[Offer] = []


class SwipeResponse(BaseModel):
    swipe: SwipeRecord
    match: Optional[MatchEvent] = None
