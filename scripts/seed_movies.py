# Loads the movie catalog into MongoDB
# scripts/seed_movies.py

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, ConnectionFailure, PyMongoError

# --- Configuration ---
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper(),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
load_dotenv(dotenv_path=os.path.join(project_root, '.env'))

DEFAULT_MOVIES_FILE = os.path.join(project_root, "data", "movies.json")
FALLBACK_DB_NAME = os.environ.get("MONGODB_DB_NAME", "movie_api")
MONGO_MOVIES_COLLECTION = "movies"


def get_mongo_client() -> MongoClient:
    """
    Connects using CONNECTION_URI (or MONGODB_URI) from the environment.

    Raises:
        ValueError: If neither variable is set.
        ConnectionFailure: If the server cannot be reached.
    """
    mongodb_uri = os.environ.get("CONNECTION_URI") or os.environ.get("MONGODB_URI")
    if not mongodb_uri:
        logger.critical("CONNECTION_URI environment variable not set.")
        raise ValueError("CONNECTION_URI (or MONGODB_URI) environment variable is required.")

    logger.info(f"Connecting to MongoDB at {mongodb_uri[:15]}...")
    client = MongoClient(mongodb_uri, serverSelectionTimeoutMS=5000)
    client.admin.command('ping')
    logger.info("MongoDB connection successful.")
    return client


def get_mongo_database(client: MongoClient) -> Database:
    try:
        return client.get_default_database()
    except ConfigurationError:
        logger.warning(f"Database name not found in URI, using fallback: {FALLBACK_DB_NAME}")
        return client[FALLBACK_DB_NAME]


def load_movies(path: str) -> List[Dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        movies = json.load(f)
    if not isinstance(movies, list):
        raise ValueError(f"{path} must contain a JSON array of movies")
    for movie in movies:
        if not movie.get("title") or not movie.get("description"):
            raise ValueError(f"Movie entries need a title and description: {movie!r}")
    return movies


def upsert_movies(db: Database, movies: List[Dict[str, Any]]) -> int:
    """Upserts movies by title. Returns the number inserted or modified."""
    collection = db[MONGO_MOVIES_COLLECTION]
    changed = 0
    for movie in movies:
        result = collection.update_one({"title": movie["title"]}, {"$set": movie}, upsert=True)
        if result.upserted_id is not None or result.modified_count:
            changed += 1
    return changed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the movies collection from a JSON file.")
    parser.add_argument("path", nargs="?", default=DEFAULT_MOVIES_FILE, help="JSON array of movies")
    args = parser.parse_args(argv)

    mongo_client = None
    try:
        movies = load_movies(args.path)
        mongo_client = get_mongo_client()
        db = get_mongo_database(mongo_client)
        changed = upsert_movies(db, movies)
        logger.info(f"Seeded {len(movies)} movies into '{db.name}.{MONGO_MOVIES_COLLECTION}' ({changed} inserted or updated)")
        return 0
    except (ValueError, OSError) as e:
        logger.error(f"Could not load movies: {e}")
        return 1
    except (ConnectionFailure, PyMongoError) as e:
        logger.error(f"MongoDB error while seeding: {e}", exc_info=True)
        return 1
    finally:
        if mongo_client:
            mongo_client.close()


if __name__ == "__main__":
    sys.exit(main())
