# movie_api/services/movie_service.py

import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from movie_api.data_access.mongo_client import MovieRepository
from movie_api.models.movie import Director, Genre, MovieRead
from movie_api.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class MovieService:
    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initializes the Movie Service.

        Args:
            db: An instance of AsyncIOMotorDatabase (Motor client).
        """
        self.movies = MovieRepository(db)

    async def list_movies(self) -> List[MovieRead]:
        """
        Raises:
            PyMongoError: If a database error occurs.
        """
        docs = await self.movies.find_all()
        logger.info(f"Fetched {len(docs)} movies")
        return [MovieRead(id=str(doc["_id"]), **doc) for doc in docs]

    async def get_movie(self, key: str) -> Optional[MovieRead]:
        """
        Looks a movie up by its ObjectId string or, failing that, its title.

        Returns:
            The movie, or None if nothing matches.
        """
        doc = await self.movies.find_by_id_or_title(key)
        if doc is None:
            logger.debug(f"No movie matches {key}")
            return None
        return MovieRead(id=str(doc["_id"]), **doc)

    async def get_genre(self, name: str) -> List[Genre]:
        """
        Returns the genres of the first movie that has a genre called name.

        Raises:
            NotFoundError: If no movie has that genre.
        """
        doc = await self.movies.find_one_by_field("genres.name", name)
        if doc is None:
            logger.warning(f"Genre not found: {name}")
            raise NotFoundError(f"Genre '{name}' not found.")
        return [Genre(**genre) for genre in doc.get("genres") or []]

    async def get_director(self, name: str) -> Director:
        """
        Raises:
            NotFoundError: If no movie has a director called name.
        """
        doc = await self.movies.find_one_by_field("director.name", name)
        if doc is None:
            logger.warning(f"Director not found: {name}")
            raise NotFoundError(f"Director '{name}' not found.")
        return Director(**doc["director"])
