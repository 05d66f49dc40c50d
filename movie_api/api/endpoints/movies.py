# movie_api/api/endpoints/movies.py

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from movie_api.api.deps import get_current_user, get_db
from movie_api.models.movie import Director, Genre, MovieRead
from movie_api.services.errors import NotFoundError
from movie_api.services.movie_service import MovieService

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Dependency to get the service ---
def get_movie_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> MovieService:
    return MovieService(db=db)
# --- ---


@router.get(
    "",  # GET /movies
    response_model=List[MovieRead],
    summary="List Movies",
)
async def list_movies(
    current_user: Dict[str, Any] = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return await movie_service.list_movies()
    except PyMongoError as e:
        logger.error(f"Error listing movies: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving movies."
        )


@router.get(
    "/genres/{genre_name}",
    response_model=List[Genre],
    summary="Get Genre",
    description="Returns the genres of the first movie that has a genre with this name.",
    responses={404: {"description": "No movie has this genre"}},
)
async def get_genre(
    genre_name: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return await movie_service.get_genre(genre_name)
    except NotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        logger.error(f"Error getting genre {genre_name}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving the genre."
        )


@router.get(
    "/directors/{director_name}",
    response_model=Director,
    summary="Get Director",
    responses={404: {"description": "No movie has this director"}},
)
async def get_director(
    director_name: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return await movie_service.get_director(director_name)
    except NotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        logger.error(f"Error getting director {director_name}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving the director."
        )


@router.get(
    "/{movie_id}",
    response_model=Optional[MovieRead],
    summary="Get Movie",
    description="Looks a movie up by its ID or title; returns null when nothing matches.",
)
async def get_movie(
    movie_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return await movie_service.get_movie(movie_id)
    except PyMongoError as e:
        logger.error(f"Error getting movie {movie_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving the movie details."
        )
