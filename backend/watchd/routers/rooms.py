import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from watchd.core.auth import decode_access_token, get_current_user
from watchd.core.dependencies import get_notifier, get_optional_catalog
from watchd.core.enums import RoomEvent
from watchd.core.exceptions import handle_exception
from watchd.core.services import MovieService as CatalogMovieService
from watchd.db import get_db
from watchd.repositories.room_repository import RoomMemberRepository
from watchd.schemas.room import (
    MemberResponse,
    RoomCreate,
    RoomDetailResponse,
    RoomFiltersResponse,
    RoomFiltersUpdate,
    RoomJoin,
    RoomJoinResponse,
    RoomLeaveResponse,
    RoomRename,
    RoomResponse,
)
from watchd.services.notification_service import ConnectionManager
from watchd.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["rooms"])
logger = logging.getLogger(__name__)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    room_data: RoomCreate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    catalog: Optional[CatalogMovieService] = Depends(get_optional_catalog),
):
    try:
        service = RoomService(db, catalog)
        filters = room_data.filters.to_document() if room_data.filters else {}
        return service.create_room(current_user_id, room_data.name, filters)
    except Exception as e:
        raise handle_exception(e)


@router.post("/join", response_model=RoomJoinResponse)
async def join_room(
    join_data: RoomJoin,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    notifier: ConnectionManager = Depends(get_notifier),
):
    try:
        result = RoomService(db).join_room(current_user_id, join_data.code)
    except Exception as e:
        raise handle_exception(e)

    if result.joined:
        await notifier.publish(result.room.id, RoomEvent.PARTNER_JOINED, {"user_id": current_user_id})
    return RoomJoinResponse(room=RoomResponse.model_validate(result.room), joined=result.joined)


@router.get("", response_model=List[RoomResponse])
def list_rooms(db: Session = Depends(get_db), current_user_id: int = Depends(get_current_user)):
    """Rooms of the caller, including archived ones they have not cleared"""
    try:
        return RoomService(db).list_rooms(current_user_id)
    except Exception as e:
        raise handle_exception(e)


@router.get("/{room_id}", response_model=RoomDetailResponse)
def get_room(room_id: int, db: Session = Depends(get_db), current_user_id: int = Depends(get_current_user)):
    try:
        room, members = RoomService(db).get_room_detail(current_user_id, room_id)
    except Exception as e:
        raise handle_exception(e)

    return RoomDetailResponse(
        **RoomResponse.model_validate(room).model_dump(),
        members=[
            MemberResponse(user_id=user.id, name=user.name, is_active=member.is_active, joined_at=member.joined_at)
            for member, user in members
        ],
    )


@router.patch("/{room_id}", response_model=RoomResponse)
def rename_room(
    room_id: int,
    rename_data: RoomRename,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
):
    try:
        return RoomService(db).rename_room(current_user_id, room_id, rename_data.name.strip())
    except Exception as e:
        raise handle_exception(e)


@router.patch("/{room_id}/filters", response_model=RoomFiltersResponse)
async def update_room_filters(
    room_id: int,
    filters_data: RoomFiltersUpdate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    catalog: Optional[CatalogMovieService] = Depends(get_optional_catalog),
    notifier: ConnectionManager = Depends(get_notifier),
):
    """Replace the room's filters; the stack is rebuilt and members are told to reload their feed"""
    try:
        room, result = RoomService(db, catalog).update_filters(
            current_user_id, room_id, filters_data.filters.to_document()
        )
    except Exception as e:
        raise handle_exception(e)

    await notifier.publish(room.id, RoomEvent.FILTERS_UPDATED, {"room_id": room.id, "filters": room.filters or {}})
    return RoomFiltersResponse(
        room=RoomResponse.model_validate(room),
        movie_count=result.movie_count,
        complete=result.complete,
    )


@router.delete("/{room_id}/leave", response_model=RoomLeaveResponse)
async def leave_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    notifier: ConnectionManager = Depends(get_notifier),
):
    try:
        result = RoomService(db).leave_room(current_user_id, room_id)
    except Exception as e:
        raise handle_exception(e)

    if result.left:
        if result.last_member:
            await notifier.publish(room_id, RoomEvent.ROOM_DISSOLVED, {"room_id": room_id})
        else:
            await notifier.publish(room_id, RoomEvent.PARTNER_LEFT, {"user_id": current_user_id})
    return RoomLeaveResponse(last_member=result.last_member, room_deleted=result.room_deleted)


@router.delete("/{room_id}/archive")
def clear_room_from_archive(
    room_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
):
    """Remove a dissolved room from the caller's archive"""
    try:
        deleted = RoomService(db).clear_from_archive(current_user_id, room_id)
        return {"success": True, "room_deleted": deleted}
    except Exception as e:
        raise handle_exception(e)


@router.websocket("/{room_id}/ws")
async def room_websocket(
    websocket: WebSocket,
    room_id: int,
    token: Optional[str] = None,
    db: Session = Depends(get_db),
    notifier: ConnectionManager = Depends(get_notifier),
):
    user_id = decode_access_token(token) if token else None
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if not RoomMemberRepository(db).is_active_member(room_id, user_id):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await notifier.connect(websocket, room_id)
    await websocket.send_json({"type": RoomEvent.JOINED.value, "room_id": room_id})

    try:
        while True:
            await websocket.receive_text()
            # Room events flow server to client only
            await websocket.send_json({"type": RoomEvent.ERROR.value, "detail": "Unsupported message"})
    except WebSocketDisconnect:
        notifier.disconnect(websocket, room_id)
    except Exception as e:
        logger.error(f"WebSocket error in room {room_id}: {e}")
        notifier.disconnect(websocket, room_id)
