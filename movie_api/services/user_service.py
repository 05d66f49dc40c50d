# movie_api/services/user_service.py

import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from movie_api.core.security import PasswordHasher
from movie_api.data_access.mongo_client import MovieRepository, UserRepository
from movie_api.models.user import UserCreate, UserRead, UserUpdate
from movie_api.services.errors import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


def _to_datetime(value: Optional[date]) -> Optional[datetime]:
    # BSON has no date-only type
    if value is None:
        return None
    return datetime.combine(value, time.min)


class UserService:
    def __init__(self, db: AsyncIOMotorDatabase, hasher: PasswordHasher):
        """
        Initializes the User Service.

        Args:
            db: An instance of AsyncIOMotorDatabase (Motor client).
            hasher: Password hasher used on create and on password change.
        """
        self.users = UserRepository(db)
        self.movies = MovieRepository(db)
        self.hasher = hasher

    async def register_user(self, user_in: UserCreate) -> UserRead:
        """
        Creates a user with a hashed password and no favorites.

        Raises:
            DuplicateError: If the username is taken.
            PyMongoError: If a database error occurs.
        """
        if await self.users.find_by_username(user_in.username):
            logger.warning(f"Registration rejected: username {user_in.username} already exists")
            raise DuplicateError(f"User {user_in.username} already exists")

        user_doc = {
            "username": user_in.username,
            "password": self.hasher.hash(user_in.password),
            "email": user_in.email,
            "birthday": _to_datetime(user_in.birthday),
            "favoriteMovies": [],
        }
        try:
            created = await self.users.insert(user_doc)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration of the same name
            raise DuplicateError(f"User {user_in.username} already exists")
        logger.info(f"Registered user {user_in.username} ({created['_id']})")
        return UserRead.from_doc(created)

    async def list_users(self) -> List[UserRead]:
        docs = await self.users.find_all()
        logger.info(f"Fetched {len(docs)} users")
        return [UserRead.from_doc(doc) for doc in docs]

    async def get_user(self, username: str) -> Optional[UserRead]:
        """Returns the user, or None when no user has that name."""
        doc = await self.users.find_by_username(username)
        return UserRead.from_doc(doc) if doc else None

    async def _resolve_movie_id(self, movie: str) -> ObjectId:
        movie_doc = await self.movies.find_by_id_or_title(movie)
        if movie_doc is None:
            logger.warning(f"Movie not found: {movie}")
            raise NotFoundError(f"Movie '{movie}' not found.")
        return movie_doc["_id"]

    async def add_favorite(self, username: str, movie: str) -> UserRead:
        """
        Appends a movie (by id or title) to the user's favorites.
        The same movie may appear more than once.

        Raises:
            NotFoundError: If the movie or the user does not exist.
        """
        movie_id = await self._resolve_movie_id(movie)
        updated = await self.users.push_favorite(username, movie_id)
        if updated is None:
            raise NotFoundError(f"User '{username}' not found.")
        logger.info(f"Added movie {movie_id} to favorites of {username}")
        return UserRead.from_doc(updated)

    async def remove_favorite(self, username: str, movie: str) -> UserRead:
        """
        Removes every occurrence of a movie from the user's favorites.
        Removing a movie that is not in the list leaves it unchanged.

        Raises:
            NotFoundError: If the movie or the user does not exist.
        """
        movie_id = await self._resolve_movie_id(movie)
        updated = await self.users.pull_favorite(username, movie_id)
        if updated is None:
            raise NotFoundError(f"User '{username}' not found.")
        logger.info(f"Removed movie {movie_id} from favorites of {username}")
        return UserRead.from_doc(updated)

    async def delete_user(self, username: str) -> None:
        """
        Raises:
            NotFoundError: With status 400 if the user does not exist.
        """
        deleted = await self.users.delete_by_username(username)
        if deleted is None:
            logger.warning(f"Delete requested for unknown user {username}")
            raise NotFoundError(f"{username} was not found", status_code=status.HTTP_400_BAD_REQUEST)
        logger.info(f"Deleted user {username}")

    async def update_user(self, username: str, user_in: UserUpdate) -> UserRead:
        """
        Replaces the user's profile fields.

        The password is re-hashed only when one is supplied. favoriteMovies is
        replaced only when supplied.

        Raises:
            NotFoundError: If the user does not exist.
            DuplicateError: If renaming to a username that is taken.
        """
        if await self.users.find_by_username(username) is None:
            raise NotFoundError(f"User '{username}' not found.")
        if user_in.username != username and await self.users.find_by_username(user_in.username):
            logger.warning(f"Rename of {username} rejected: {user_in.username} already exists")
            raise DuplicateError(f"User {user_in.username} already exists")

        fields: Dict[str, Any] = {
            "username": user_in.username,
            "email": user_in.email,
            "birthday": _to_datetime(user_in.birthday),
        }
        if user_in.password is not None:
            fields["password"] = self.hasher.hash(user_in.password)
        if user_in.favoriteMovies is not None:
            fields["favoriteMovies"] = [ObjectId(mid) for mid in user_in.favoriteMovies]

        try:
            updated = await self.users.set_fields(username, fields)
        except DuplicateKeyError:
            raise DuplicateError(f"User {user_in.username} already exists")
        if updated is None:
            # Deleted between the existence check and the update
            raise NotFoundError(f"User '{username}' not found.")
        logger.info(f"Updated user {username} (fields: {sorted(fields)})")
        return UserRead.from_doc(updated)
