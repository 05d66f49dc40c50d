# FastAPI dependencies (e.g., get_db, get_current_user)
# movie_api/api/deps.py

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError, ConnectionFailure, PyMongoError

from movie_api.core.config import Settings
from movie_api.core.security import (
    AuthError,
    InsufficientPermissionsException,
    InvalidTokenException,
    MissingTokenException,
    PasswordHasher,
    TokenExpiredException,
    TokenService,
    token_bearer_scheme,
)
from movie_api.data_access.mongo_client import UserRepository

logger = logging.getLogger(__name__)


# --- Connection Lifecycle ---

async def initialize_connections(app: FastAPI):
    """
    Connects to MongoDB and stores the client and database on app.state.
    Called from the FastAPI lifespan at startup.
    """
    settings: Settings = app.state.settings
    uri = settings.MONGODB_URI.get_secret_value()
    logger.info(f"Attempting to connect to MongoDB: {uri[:15]}...")
    try:
        client = AsyncIOMotorClient(uri)
        await client.admin.command("ping")
        try:
            db = client.get_default_database()
        except ConfigurationError:
            db = client[settings.MONGODB_DB_NAME]
        app.state.mongo_client = client
        app.state.db = db
        logger.info(f"MongoDB client initialized successfully. Using database: '{db.name}'")
    except ConnectionFailure as e:
        # Keep serving; requests needing the DB get a 503 from get_db
        logger.error(f"MongoDB connection failed during initialization: {e}", exc_info=True)
        app.state.mongo_client = None
        app.state.db = None
        return

    try:
        await UserRepository(db).ensure_indexes()
    except PyMongoError as e:
        # Existing duplicate usernames block the index; the pre-insert check still applies
        logger.error(f"Could not create user indexes: {e}", exc_info=True)


async def close_connections(app: FastAPI):
    """Closes the MongoDB client. Called from the FastAPI lifespan at shutdown."""
    client: Optional[AsyncIOMotorClient] = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        logger.info("MongoDB client closed.")
    app.state.mongo_client = None
    app.state.db = None


# --- Application State Dependencies ---

async def get_db(request: Request) -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    Yields the application's MongoDB database instance.

    Raises:
        HTTPException 503: If the database instance is not available.
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        logger.critical("MongoDB database instance is not available. Check initialization.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available.",
        )
    yield db


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


# --- Authentication Dependencies ---

async def get_current_user(
    auth_credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """
    Bearer guard for protected routes: verifies the token and returns its
    decoded identity (the user fields embedded at login, plus 'sub').

    Raises:
        MissingTokenException: No bearer token in the Authorization header.
        TokenExpiredException: The token's exp has passed.
        InvalidTokenException: Bad signature, malformed token or missing subject.
    """
    if auth_credentials is None or not auth_credentials.credentials:
        logger.warning("Authentication attempt failed: No token provided in Authorization header.")
        raise MissingTokenException()

    try:
        return token_service.verify(auth_credentials.credentials)
    except AuthError as e:
        logger.warning(f"Authentication attempt failed: {e.message}")
        if e.expired:
            raise TokenExpiredException()
        raise InvalidTokenException()


async def require_self(
    username: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Guard for routes that modify /users/{username}: the token holder may only
    act on their own record.

    Raises:
        InsufficientPermissionsException: If the token subject is another user.
    """
    if current_user.get("sub") != username:
        logger.warning(f"User {current_user.get('sub')} attempted to modify user {username}")
        raise InsufficientPermissionsException(detail="You may only modify your own account.")
    return current_user
