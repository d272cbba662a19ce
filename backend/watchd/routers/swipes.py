import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from watchd.core.auth import get_current_user
from watchd.core.dependencies import get_notifier, get_optional_movie_service
from watchd.core.enums import ResultStatus, RoomEvent
from watchd.core.exceptions import handle_exception
from watchd.db import get_db
from watchd.schemas.swipe import SwipeCreate, SwipeRecord, SwipeResponse, MatchEvent
from watchd.services.notification_service import ConnectionManager
from watchd.services.swipe_service import SwipeService

router = APIRouter(prefix="/swipes", tags=["swipes"])
logger = logging.getLogger(__name__)

@router.post("", response_model=SwipeResponse, status_code=status.HTTP_201_CREATED)
async def create_swipe(
    swipe_data: SwipeCreate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    movie_service=Depends(get_optional_movie_service),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Record a swipe; a right swipe that completes the room's vote creates a match"""
    try:
        result = await SwipeService(db, movie_service).record_swipe(
            current_user_id, swipe_data.movie_id, swipe_data.room_id, swipe_data.direction
        )
    except Exception as e:
        raise handle_exception(e)

    if result.status == ResultStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    if result.status == ResultStatus.FORBIDDEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this room")

    match = None
    if result.match is not None:
        payload = result.match.to_event_payload()
        logger.info(f"Match in room {swipe_data.room_id} on movie {swipe_data.movie_id}")
        await notifier.publish(swipe_data.room_id, RoomEvent.MATCH, payload)
        match = MatchEvent(**payload)

    return SwipeResponse(swipe=SwipeRecord.model_validate(result.swipe), match=match)
