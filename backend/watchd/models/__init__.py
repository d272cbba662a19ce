from watchd.db import Base
from .user import User
from .room import Room, RoomMember, RoomStackEntry, Swipe, Match, RoomStatus, SwipeDirection
from .favorite import Favorite

__all__ = [
    'User', 'Room', 'RoomMember', 'RoomStackEntry', 'Swipe', 'Match',
    'RoomStatus', 'SwipeDirection', 'Favorite'
]
