from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from watchd.models.room import RoomStatus


class RoomFilters(BaseModel):
    """Filter document stored on a room; unknown keys are kept as-is"""
    genres: Optional[List[int]] = None
    streaming_services: Optional[List[str]] = Field(default=None, alias="streamingServices")
    year_from: Optional[int] = Field(default=None, alias="yearFrom", ge=1870, le=2100)
    min_rating: Optional[float] = Field(default=None, alias="minRating", ge=0, le=10)
    max_runtime: Optional[int] = Field(default=None, alias="maxRuntime", gt=0)
    language: Optional[str] = Field(default=None, min_length=2, max_length=8)

    class Config:
        populate_by_name = True
        extra = "allow"

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RoomCreate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    filters: Optional[RoomFilters] = None


class RoomJoin(BaseModel):
    code: str = Field(..., min_length=6, max_length=6)


class RoomRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)

    class Config:
        str_strip_whitespace = True


class RoomFiltersUpdate(BaseModel):
    filters: RoomFilters


class RoomResponse(BaseModel):
    id: int
    code: str
    name: Optional[str] = None
    status: RoomStatus
    created_by: int
    filters: Optional[Dict[str, Any]] = None
    last_activity_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberResponse(BaseModel):
    user_id: int
    name: str
    is_active: bool
    joined_at: Optional[datetime] = None


class RoomDetailResponse(RoomResponse):
    members: List[MemberResponse] = []


class RoomJoinResponse(BaseModel):
    room: RoomResponse
    joined: bool


class RoomFiltersResponse(BaseModel):
    room: RoomResponse
    movie_count: int
    complete: bool


class RoomLeaveResponse(BaseModel):
    last_member: bool
    room_deleted: bool
