from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from watchd.db import Base
import enum


class RoomStatus(enum.Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    DISSOLVED = "dissolved"


class SwipeDirection(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(6), unique=True, index=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(RoomStatus), default=RoomStatus.WAITING, nullable=False, index=True)
    name = Column(String(64), nullable=True)
    filters = Column(JSON, nullable=True)
    last_activity_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("RoomMember", back_populates="room", cascade="all, delete-orphan")
    stack_entries = relationship(
        "RoomStackEntry", back_populates="room", cascade="all, delete-orphan",
        order_by="RoomStackEntry.position",
    )
    swipes = relationship("Swipe", back_populates="room", cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="room", cascade="all, delete-orphan")

    def touch(self):
        self.last_activity_at = datetime.now(timezone.utc)

    def activate(self):
        self.status = RoomStatus.ACTIVE

    def mark_waiting(self):
        self.status = RoomStatus.WAITING

    def dissolve(self):
        self.status = RoomStatus.DISSOLVED

    def is_dissolved(self) -> bool:
        return self.status == RoomStatus.DISSOLVED


class RoomMember(Base):
    __tablename__ = "room_members"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_room_member"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    # Set when this member removed the dissolved room from their own archive
    deleted_from_archive_at = Column(DateTime(timezone=True), nullable=True)

    room = relationship("Room", back_populates="members")
    user = relationship("User", back_populates="memberships")

    def leave(self):
        self.is_active = False

    def rejoin(self):
        self.is_active = True

    def clear_from_archive(self):
        self.deleted_from_archive_at = datetime.now(timezone.utc)


class RoomStackEntry(Base):
    __tablename__ = "room_stack"
    __table_args__ = (
        UniqueConstraint("room_id", "position", name="uq_room_stack_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    room = relationship("Room", back_populates="stack_entries")


class Swipe(Base):
    __tablename__ = "swipes"
    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", "room_id", name="uq_swipe_user_movie_room"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    direction = Column(Enum(SwipeDirection), nullable=False)
    swiped_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    room = relationship("Room", back_populates="swipes")
    user = relationship("User", back_populates="swipes")


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("room_id", "movie_id", name="uq_match_room_movie"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)
    watched = Column(Boolean, default=False, nullable=False, index=True)
    matched_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    room = relationship("Room", back_populates="matches")
