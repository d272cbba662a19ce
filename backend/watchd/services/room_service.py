import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from watchd.core.exceptions import (
    BaseAppException,
    CatalogNotConfiguredException,
    InvalidRoomActionException,
    NotRoomMemberException,
    RoomDissolvedException,
    RoomFullException,
    RoomNotFoundException,
)
from watchd.core.services import MovieService as CatalogMovieService
from watchd.models.room import Room, RoomMember, RoomStatus
from watchd.models.user import User
from watchd.repositories.room_repository import RoomRepository, RoomMemberRepository
from watchd.services.room_stack_service import RoomStackService, StackBuildResult

logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 6
# No 0/O or 1/I, codes are typed by hand
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_ROOM_MEMBERS = 2


@dataclass
class JoinResult:
    room: Room
    # True when the caller became (or became again) an active member
    joined: bool


@dataclass
class LeaveResult:
    last_member: bool
    room_deleted: bool = False
    # False when the caller had already left; nothing changed
    left: bool = True


class RoomService:
    """Application service for the room lifecycle: create, join, leave, archive."""

    def __init__(self, db: Session, catalog: Optional[CatalogMovieService] = None):
        self.db = db
        self.room_repo = RoomRepository(db)
        self.member_repo = RoomMemberRepository(db)
        self.stack_service = RoomStackService(db, catalog)

    def create_room(self, creator_id: int, name: Optional[str] = None,
                    filters: Optional[Dict[str, Any]] = None) -> Room:
        """Create a room with the creator as its first member and build its stack."""
        if self.stack_service.catalog is None:
            raise CatalogNotConfiguredException()

        room = Room(
            code=self._generate_unique_code(),
            created_by=creator_id,
            status=RoomStatus.WAITING,
            name=name,
            filters=filters or None,
        )
        room.touch()
        self.db.add(room)
        self.db.flush()
        self.db.add(RoomMember(room_id=room.id, user_id=creator_id, is_active=True))
        self.db.commit()
        self.db.refresh(room)

        self.stack_service.build_stack(room.id, filters or {})
        logger.info(f"Room {room.id} ({room.code}) created by user {creator_id}")
        return room

    def join_room(self, user_id: int, room_code: str) -> JoinResult:
        room = self.room_repo.get_by_code(room_code.strip())
        if room is None:
            raise RoomNotFoundException()
        # Held until commit so concurrent joins count members one at a time
        room = self.room_repo.lock(room.id)
        if room.is_dissolved():
            self.db.rollback()
            raise RoomDissolvedException()

        membership = self.member_repo.get_membership(room.id, user_id)
        if membership is not None:
            if membership.is_active:
                self.db.commit()
                return JoinResult(room=room, joined=False)
            membership.rejoin()
            self.db.flush()
            self._refresh_status(room)
            room.touch()
            self.db.commit()
            self.db.refresh(room)
            return JoinResult(room=room, joined=True)

        if self.member_repo.count_members(room.id) >= MAX_ROOM_MEMBERS:
            self.db.rollback()
            raise RoomFullException()

        self.db.add(RoomMember(room_id=room.id, user_id=user_id, is_active=True))
        self.db.flush()
        self._refresh_status(room)
        room.touch()
        self.db.commit()
        self.db.refresh(room)
        logger.info(f"User {user_id} joined room {room.id}")
        return JoinResult(room=room, joined=True)

    def get_room_detail(self, user_id: int, room_id: int) -> Tuple[Room, List[Tuple[RoomMember, User]]]:
        room = self._get_room_or_raise(room_id)
        self._require_member(room.id, user_id)
        return room, self.member_repo.list_with_users(room.id)

    def list_rooms(self, user_id: int) -> List[Room]:
        return self.room_repo.list_for_user(user_id)

    def rename_room(self, user_id: int, room_id: int, name: str) -> Room:
        room = self._get_room_or_raise(room_id)
        self._require_member(room.id, user_id)
        room.name = name
        room.touch()
        self.db.commit()
        self.db.refresh(room)
        return room

    def update_filters(self, user_id: int, room_id: int,
                       filters: Optional[Dict[str, Any]]) -> Tuple[Room, StackBuildResult]:
        """Store new filters and rebuild the stack from scratch"""
        room = self._get_room_or_raise(room_id)
        self._require_member(room.id, user_id, active_only=True)
        if room.is_dissolved():
            raise InvalidRoomActionException("Room has been dissolved")
        if self.stack_service.catalog is None:
            raise CatalogNotConfiguredException()

        room.filters = filters or None
        room.touch()
        self.db.commit()

        result = self.stack_service.build_stack(room.id, filters or {})
        self.db.refresh(room)
        return room, result

    def leave_room(self, user_id: int, room_id: int) -> LeaveResult:
        """Soft-leave a room; the last member out dissolves it, or deletes it if nobody ever joined."""
        room = self._get_room_or_raise(room_id)
        membership = self.member_repo.get_membership(room.id, user_id)
        if membership is None:
            raise NotRoomMemberException(status_code=404)

        if not membership.is_active:
            return LeaveResult(last_member=self.member_repo.count_active(room.id) == 0, left=False)

        membership.leave()
        self.db.flush()

        if self.member_repo.count_active(room.id) > 0:
            room.mark_waiting()
            room.touch()
            self.db.commit()
            return LeaveResult(last_member=False)

        if self.member_repo.count_members(room.id) == 1:
            self.db.delete(room)
            self.db.commit()
            logger.info(f"Room {room_id} deleted: nobody ever joined")
            return LeaveResult(last_member=True, room_deleted=True)

        room.dissolve()
        room.touch()
        self.db.commit()
        logger.info(f"Room {room_id} dissolved and archived")
        return LeaveResult(last_member=True)

    def clear_from_archive(self, user_id: int, room_id: int) -> bool:
        """Hide a dissolved room from the caller's archive; returns True when the room was hard deleted."""
        room = self._get_room_or_raise(room_id)
        if not room.is_dissolved():
            raise InvalidRoomActionException("Room is not archived")

        membership = self.member_repo.get_membership(room.id, user_id)
        if membership is None or membership.deleted_from_archive_at is not None:
            raise NotRoomMemberException("Not a member or already deleted")

        membership.clear_from_archive()
        self.db.flush()

        if self.member_repo.count_not_cleared(room.id) == 0:
            self.db.delete(room)
            self.db.commit()
            logger.info(f"Room {room_id} hard-deleted: every member cleared it from their archive")
            return True

        self.db.commit()
        return False

    # ── Private helpers ──────────────────────────────────────────

    def _generate_unique_code(self) -> str:
        for _ in range(10):
            code = "".join(random.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if not self.room_repo.code_exists(code):
                return code
        raise BaseAppException("Could not generate unique room code")

    def _get_room_or_raise(self, room_id: int) -> Room:
        room = self.room_repo.get(room_id)
        if room is None:
            raise RoomNotFoundException()
        return room

    def _require_member(self, room_id: int, user_id: int, active_only: bool = False) -> RoomMember:
        membership = self.member_repo.get_membership(room_id, user_id)
        if membership is None or (active_only and not membership.is_active):
            raise NotRoomMemberException()
        return membership

    def _refresh_status(self, room: Room) -> None:
        if self.member_repo.count_active(room.id) >= MAX_ROOM_MEMBERS:
            room.activate()
        else:
            room.mark_waiting()
