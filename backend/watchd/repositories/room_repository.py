from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from watchd.repositories.base_repository import BaseRepository
from watchd.models.room import Room, RoomMember, RoomStackEntry
from watchd.models.user import User

class RoomRepository(BaseRepository[Room]):
    """Repository for rooms"""

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def get_by_code(self, code: str) -> Optional[Room]:
        return self.filter_one_by(code=code.upper())

    def code_exists(self, code: str) -> bool:
        return self.exists(code=code)

    def for_update(self, room_id: int):
        return (
            self.db.query(Room)
            .filter(Room.id == room_id)
            .populate_existing()
            .with_for_update()
        )

    def lock(self, room_id: int) -> Room:
        """Re-read the room under a row lock held until the transaction ends (no-op on SQLite)"""
        return self.for_update(room_id).one()

    def list_for_user(self, user_id: int) -> List[Room]:
        """Rooms the user belongs to that are still in their archive, most recent first"""
        return (
            self.db.query(Room)
            .join(RoomMember, RoomMember.room_id == Room.id)
            .filter(
                RoomMember.user_id == user_id,
                RoomMember.deleted_from_archive_at.is_(None),
            )
            .order_by(Room.last_activity_at.desc(), Room.id.desc())
            .all()
        )

    def touch(self, room: Room) -> None:
        room.touch()
        self.db.commit()


class RoomMemberRepository(BaseRepository[RoomMember]):
    """Repository for room memberships"""

    def __init__(self, db: Session):
        super().__init__(RoomMember, db)

    def get_membership(self, room_id: int, user_id: int) -> Optional[RoomMember]:
        return self.filter_one_by(room_id=room_id, user_id=user_id)

    def is_active_member(self, room_id: int, user_id: int) -> bool:
        return self.exists(room_id=room_id, user_id=user_id, is_active=True)

    def count_members(self, room_id: int) -> int:
        """Every member who ever joined, active or not"""
        return self.count_by(room_id=room_id)

    def count_active(self, room_id: int) -> int:
        return self.count_by(room_id=room_id, is_active=True)

    def count_not_cleared(self, room_id: int) -> int:
        return (
            self.db.query(RoomMember)
            .filter(RoomMember.room_id == room_id, RoomMember.deleted_from_archive_at.is_(None))
            .count()
        )

    def list_with_users(self, room_id: int) -> List[Tuple[RoomMember, User]]:
        return (
            self.db.query(RoomMember, User)
            .join(User, User.id == RoomMember.user_id)
            .filter(RoomMember.room_id == room_id)
            .order_by(RoomMember.joined_at, RoomMember.id)
            .all()
        )


class RoomStackRepository(BaseRepository[RoomStackEntry]):
    """Repository for the ordered per-room candidate list"""

    def __init__(self, db: Session):
        super().__init__(RoomStackEntry, db)

    def replace(self, room_id: int, movie_ids: List[int]) -> int:
        """Delete the room's stack and insert ``movie_ids`` at positions 0..n-1 in one transaction"""
        try:
            self.db.query(RoomStackEntry).filter(RoomStackEntry.room_id == room_id).delete(
                synchronize_session=False
            )
            self.db.add_all([
                RoomStackEntry(room_id=room_id, movie_id=movie_id, position=position)
                for position, movie_id in enumerate(movie_ids)
            ])
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return len(movie_ids)

    def get_movie_ids(self, room_id: int) -> List[int]:
        rows = (
            self.db.query(RoomStackEntry.movie_id)
            .filter(RoomStackEntry.room_id == room_id)
            .order_by(RoomStackEntry.position)
            .all()
        )
        return [row[0] for row in rows]
