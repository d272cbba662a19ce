from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from watchd.core.auth import get_current_user
from watchd.core.dependencies import get_movie_service
from watchd.core.enums import ResultStatus
from watchd.core.exceptions import handle_exception
from watchd.db import get_db
from watchd.schemas.movie import FeedResponse, PopularMoviesResponse
from watchd.services.feed_service import FeedService
from watchd.services.movie_service import MovieService

router = APIRouter(prefix="/movies", tags=["movies"])

@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    room_id: int = Query(..., gt=0, description="Room whose stack is served"),
    page: int = Query(1, description="Page number, values below 1 are treated as 1"),
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    """Next movies of the room stack the caller has not swiped yet"""
    try:
        feed = await FeedService(db, movie_service).get_page(current_user_id, room_id, page)
    except Exception as e:
        raise handle_exception(e)

    if feed.status == ResultStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    if feed.status == ResultStatus.FORBIDDEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this room")

    return FeedResponse(
        page=feed.page,
        movies=feed.movies,
        remaining=feed.remaining,
        exhausted=feed.exhausted,
    )

@router.get("/popular", response_model=PopularMoviesResponse)
async def get_popular_movies(
    page: int = Query(1, ge=1, le=500, description="Page number"),
    current_user_id: int = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        movies = await movie_service.get_popular_movies(page)
        return PopularMoviesResponse(page=page, movies=movies)
    except Exception as e:
        raise handle_exception(e)
