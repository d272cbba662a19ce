import logging

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)

class BaseAppException(Exception):
    """Base exception for application"""
    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class UserNotFoundException(BaseAppException):
    """Raised when user is not found"""
    def __init__(self, message: str = "User not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class UserAlreadyExistsException(BaseAppException):
    """Raised when email is already registered"""
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, status.HTTP_409_CONFLICT)

    def to_dict(self):
        """Return error response as dictionary with error code"""
        return {
            "error_code": "USER_ALREADY_EXISTS",
            "message": self.message,
            "status_code": self.status_code
        }

class InvalidCredentialsException(BaseAppException):
    """Raised when credentials are invalid"""
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)

    def to_dict(self):
        """Return error response as dictionary with error code"""
        return {
            "error_code": "INVALID_CREDENTIALS",
            "message": self.message,
            "status_code": self.status_code
        }

class GuestUpgradeException(BaseAppException):
    """Raised when a non-guest account tries to upgrade"""
    def __init__(self, message: str = "Only guest accounts can be upgraded"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

class RoomNotFoundException(BaseAppException):
    """Raised when a room id or join code is unknown"""
    def __init__(self, message: str = "Room not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class RoomFullException(BaseAppException):
    """Raised when a third user tries to join a room"""
    def __init__(self, message: str = "Room is full"):
        super().__init__(message, status.HTTP_409_CONFLICT)

class RoomDissolvedException(BaseAppException):
    """Raised when joining a room that has been dissolved"""
    def __init__(self, message: str = "Room has been dissolved"):
        super().__init__(message, status.HTTP_410_GONE)

class NotRoomMemberException(BaseAppException):
    """Raised when the caller does not belong to the room"""
    def __init__(self, message: str = "Not a member of this room", status_code: int = status.HTTP_403_FORBIDDEN):
        super().__init__(message, status_code)

class InvalidRoomActionException(BaseAppException):
    """Raised when an action does not fit the room's current state"""
    def __init__(self, message: str = "Invalid room action"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

class MatchNotFoundException(BaseAppException):
    """Raised when a match id is unknown within a room"""
    def __init__(self, message: str = "Match not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class CatalogNotConfiguredException(BaseAppException):
    """Raised when the movie catalog has no API key configured"""
    def __init__(self, message: str = "TMDB_API_KEY not configured"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


def handle_exception(e: Exception) -> HTTPException:
    """Convert domain exceptions to HTTP responses"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, BaseAppException):
        return HTTPException(
            status_code=e.status_code,
            detail=e.message
        )
    logger.error(f"Unhandled error: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An internal server error occurred"
    )
