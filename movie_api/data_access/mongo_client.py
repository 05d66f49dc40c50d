# MongoDB connection and repository logic
# movie_api/data_access/mongo_client.py

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
MOVIES_COLLECTION = "movies"


# --- Base Repository ---
class BaseRepository:
    """Common plumbing for repositories backed by a single collection."""
    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[collection_name]
        logger.debug(f"Initialized repository for collection: {collection_name}")

    def _validate_object_id(self, id_str: str) -> Optional[ObjectId]:
        """Validates a string as a MongoDB ObjectId."""
        if ObjectId.is_valid(id_str):
            return ObjectId(id_str)
        return None


# --- User Repository ---
class UserRepository(BaseRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, collection_name=USERS_COLLECTION)

    async def ensure_indexes(self) -> None:
        """Creates the unique index on username (idempotent)."""
        try:
            await self.collection.create_index([("username", ASCENDING)], unique=True, name="username_unique")
        except PyMongoError as e:
            logger.error(f"DB error creating user indexes: {e}", exc_info=True)
            raise

    async def find_all(self) -> List[Dict[str, Any]]:
        try:
            return await self.collection.find().to_list(length=None)
        except PyMongoError as e:
            logger.error(f"DB error listing users: {e}", exc_info=True)
            raise

    async def find_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one({"username": username})
        except PyMongoError as e:
            logger.error(f"DB error finding user {username}: {e}", exc_info=True)
            raise

    async def insert(self, user_doc: Dict[str, Any]) -> Dict[str, Any]:
        """Inserts a user document and returns it with its new _id."""
        try:
            result = await self.collection.insert_one(user_doc)
            return {**user_doc, "_id": result.inserted_id}
        except DuplicateKeyError:
            logger.warning(f"Duplicate username on insert: {user_doc.get('username')}")
            raise
        except PyMongoError as e:
            logger.error(f"DB error inserting user {user_doc.get('username')}: {e}", exc_info=True)
            raise

    async def _update_one_returning(self, username: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one_and_update(
                {"username": username},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            logger.warning(f"Duplicate username on update of {username}")
            raise
        except PyMongoError as e:
            logger.error(f"DB error updating user {username} with {update}: {e}", exc_info=True)
            raise

    async def push_favorite(self, username: str, movie_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Appends movie_id to favoriteMovies (duplicates allowed). Returns the updated user."""
        return await self._update_one_returning(username, {"$push": {"favoriteMovies": movie_id}})

    async def pull_favorite(self, username: str, movie_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Removes every occurrence of movie_id from favoriteMovies. Returns the updated user."""
        return await self._update_one_returning(username, {"$pull": {"favoriteMovies": movie_id}})

    async def set_fields(self, username: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._update_one_returning(username, {"$set": fields})

    async def delete_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Deletes the user and returns the removed document, or None if absent."""
        try:
            return await self.collection.find_one_and_delete({"username": username})
        except PyMongoError as e:
            logger.error(f"DB error deleting user {username}: {e}", exc_info=True)
            raise


# --- Movie Repository ---
class MovieRepository(BaseRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, collection_name=MOVIES_COLLECTION)

    async def find_all(self) -> List[Dict[str, Any]]:
        try:
            return await self.collection.find().to_list(length=None)
        except PyMongoError as e:
            logger.error(f"DB error listing movies: {e}", exc_info=True)
            raise

    async def find_by_id_or_title(self, key: str) -> Optional[Dict[str, Any]]:
        """Looks the movie up by ObjectId when key is one, otherwise by exact title."""
        obj_id = self._validate_object_id(key)
        try:
            if obj_id:
                doc = await self.collection.find_one({"_id": obj_id})
                if doc:
                    return doc
            return await self.collection.find_one({"title": key})
        except PyMongoError as e:
            logger.error(f"DB error finding movie {key}: {e}", exc_info=True)
            raise

    async def find_one_by_field(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """First movie whose (possibly nested, dotted) field equals value."""
        try:
            return await self.collection.find_one({field: value})
        except PyMongoError as e:
            logger.error(f"DB error finding movie by {field}={value}: {e}", exc_info=True)
            raise
