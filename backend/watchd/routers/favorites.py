from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from watchd.core.auth import get_current_user
from watchd.core.dependencies import get_optional_movie_service
from watchd.core.exceptions import handle_exception
from watchd.db import get_db
from watchd.schemas.favorite import FavoriteCreate, FavoriteResponse
from watchd.services.favorite_service import FavoriteService

router = APIRouter(prefix="/favorites", tags=["favorites"])

@router.get("", response_model=List[FavoriteResponse])
async def list_favorites(
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    movie_service=Depends(get_optional_movie_service),
):
    try:
        return await FavoriteService(db, movie_service).list_favorites(current_user_id)
    except Exception as e:
        raise handle_exception(e)

@router.post("", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    favorite_data: FavoriteCreate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
):
    """Save a movie; saving it twice keeps one entry"""
    try:
        return FavoriteService(db).add(current_user_id, favorite_data.movie_id)
    except Exception as e:
        raise handle_exception(e)

@router.delete("/{movie_id}")
def remove_favorite(
    movie_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
):
    try:
        removed = FavoriteService(db).remove(current_user_id, movie_id)
        return {"success": True, "removed": removed}
    except Exception as e:
        raise handle_exception(e)
