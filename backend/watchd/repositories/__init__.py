from .base_repository import BaseRepository
from .user_repository import UserRepository
from .room_repository import RoomRepository, RoomMemberRepository, RoomStackRepository
from .swipe_repository import SwipeRepository
from .match_repository import MatchRepository
from .favorite_repository import FavoriteRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "RoomRepository",
    "RoomMemberRepository",
    "RoomStackRepository",
    "SwipeRepository",
    "MatchRepository",
    "FavoriteRepository",
]
