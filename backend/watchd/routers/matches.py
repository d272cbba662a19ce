from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from watchd.core.auth import get_current_user
from watchd.core.dependencies import get_optional_movie_service
from watchd.core.exceptions import handle_exception
from watchd.db import get_db
from watchd.schemas.match import MatchResponse, WatchedUpdate
from watchd.services.match_service import MatchService

router = APIRouter(prefix="/matches", tags=["matches"])

@router.get("/{room_id}", response_model=List[MatchResponse])
async def list_matches(
    room_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    movie_service=Depends(get_optional_movie_service),
):
    """Matches of a room, newest first"""
    try:
        return await MatchService(db, movie_service).list_matches(current_user_id, room_id)
    except Exception as e:
        raise handle_exception(e)

@router.patch("/{room_id}/{match_id}", response_model=MatchResponse)
def set_match_watched(
    room_id: int,
    match_id: int,
    update_data: WatchedUpdate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
):
    try:
        match = MatchService(db).set_watched(current_user_id, room_id, match_id, update_data.watched)
        return MatchService.to_dict(match)
    except Exception as e:
        raise handle_exception(e)
