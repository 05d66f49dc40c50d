import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from movie_api.core.security import PasswordHasher
from movie_api.data_access.mongo_client import UserRepository
from movie_api.models.user import UserRead

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


class RejectReason(str, Enum):
    USER_NOT_FOUND = "user not found"
    BAD_PASSWORD = "bad password"


@dataclass
class LoginOutcome:
    state: LoginState = LoginState.PENDING
    user: Optional[UserRead] = None
    reason: Optional[RejectReason] = None

    @property
    def authenticated(self) -> bool:
        return self.state is LoginState.AUTHENTICATED


class LocalStrategy:
    """
    Username/password verification against the stored user records.

    Nothing is persisted on success; the caller decides what to issue.
    """

    def __init__(self, db: AsyncIOMotorDatabase, hasher: PasswordHasher):
        self.users = UserRepository(db)
        self.hasher = hasher

    async def authenticate(self, username: str, password: str) -> LoginOutcome:
        """
        Checks the submitted credentials.

        Raises:
            PyMongoError: If the user lookup fails.
        """
        outcome = LoginOutcome()
        logger.info(f"Attempting login for user: {username}")

        user_doc = await self.users.find_by_username(username)
        if user_doc is None:
            outcome.state = LoginState.REJECTED
            outcome.reason = RejectReason.USER_NOT_FOUND
            logger.warning(f"Login rejected for {username}: {outcome.reason.value}")
            return outcome

        if not self.hasher.verify(password, user_doc.get("password", "")):
            outcome.state = LoginState.REJECTED
            outcome.reason = RejectReason.BAD_PASSWORD
            logger.warning(f"Login rejected for {username}: {outcome.reason.value}")
            return outcome

        outcome.state = LoginState.AUTHENTICATED
        outcome.user = UserRead.from_doc(user_doc)
        logger.info(f"Successfully authenticated user: {username}")
        return outcome
