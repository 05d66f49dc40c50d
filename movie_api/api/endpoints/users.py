# movie_api/api/endpoints/users.py

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from movie_api.api.deps import get_current_user, get_db, get_password_hasher, require_self
from movie_api.core.security import PasswordHasher
from movie_api.models.user import UserCreate, UserRead, UserUpdate
from movie_api.services.errors import ServiceError
from movie_api.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Dependency to get the service ---
def get_user_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db=db, hasher=hasher)
# --- ---


def _store_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An error occurred while {action}.",
    )


@router.post(
    "",  # POST /users
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register User",
    responses={
        400: {"description": "Username already exists"},
        422: {"description": "Validation Error (username, password or email)"},
    }
)
async def register_user(
    user_in: UserCreate,
    user_service: UserService = Depends(get_user_service),
):
    """Creates a user with a hashed password and an empty favorites list."""
    try:
        return await user_service.register_user(user_in)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        raise _store_error("registering the user", e)


@router.get(
    "",  # GET /users
    response_model=List[UserRead],
    summary="List Users",
)
async def list_users(
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.list_users()
    except PyMongoError as e:
        raise _store_error("retrieving users", e)


@router.get(
    "/{username}",
    response_model=Optional[UserRead],
    summary="Get User",
    description="Returns the user, or null when no user has that username.",
)
async def get_user(
    username: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.get_user(username)
    except PyMongoError as e:
        raise _store_error(f"retrieving user {username}", e)


@router.post(
    "/{username}/movies/{movie}",
    response_model=UserRead,
    summary="Add Favorite Movie",
    description="Appends a movie (by ID or title) to the user's favorites.",
    responses={
        403: {"description": "Token belongs to another user"},
        404: {"description": "User or movie not found"},
    }
)
async def add_favorite_movie(
    username: str,
    movie: str,
    current_user: Dict[str, Any] = Depends(require_self),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.add_favorite(username, movie)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        raise _store_error("adding the favorite movie", e)


@router.delete(
    "/{username}/movies/{movie}",
    response_model=UserRead,
    summary="Remove Favorite Movie",
    description="Removes every occurrence of a movie from the user's favorites.",
    responses={
        403: {"description": "Token belongs to another user"},
        404: {"description": "User or movie not found"},
    }
)
async def remove_favorite_movie(
    username: str,
    movie: str,
    current_user: Dict[str, Any] = Depends(require_self),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.remove_favorite(username, movie)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        raise _store_error("removing the favorite movie", e)


@router.delete(
    "/{username}",
    response_class=PlainTextResponse,
    summary="Delete User",
    responses={
        400: {"description": "User not found"},
        403: {"description": "Token belongs to another user"},
    }
)
async def delete_user(
    username: str,
    current_user: Dict[str, Any] = Depends(require_self),
    user_service: UserService = Depends(get_user_service),
):
    try:
        await user_service.delete_user(username)
    except ServiceError as e:
        return PlainTextResponse(e.message, status_code=e.status_code)
    except PyMongoError as e:
        raise _store_error(f"deleting user {username}", e)
    return PlainTextResponse(f"{username} was deleted.")


@router.put(
    "/{username}",
    response_model=UserRead,
    summary="Update User",
    description="Replaces username, email and birthday; password and favoriteMovies only when supplied.",
    responses={
        400: {"description": "New username already exists"},
        403: {"description": "Token belongs to another user"},
        404: {"description": "User not found"},
        422: {"description": "Validation Error"},
    }
)
async def update_user(
    username: str,
    user_in: UserUpdate,
    current_user: Dict[str, Any] = Depends(require_self),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return await user_service.update_user(username, user_in)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except PyMongoError as e:
        raise _store_error(f"updating user {username}", e)
