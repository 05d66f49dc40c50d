import logging

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from movie_api.api.deps import get_db, get_password_hasher, get_token_service
from movie_api.core.security import PasswordHasher, TokenService
from movie_api.models.auth import LoginResponse, UserLogin
from movie_api.services.auth_service import LocalStrategy

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Dependencies ---
def get_local_strategy(
    db: AsyncIOMotorDatabase = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> LocalStrategy:
    return LocalStrategy(db=db, hasher=hasher)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User Login",
    description="Authenticates a user with username and password, returning the user and a bearer token.",
    responses={
        400: {"description": "Incorrect username or password"},
        500: {"description": "Internal server error during login"},
    }
)
async def login_user(
    login_data: UserLogin,
    strategy: LocalStrategy = Depends(get_local_strategy),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Exchanges username and password for a token. No server-side session is kept.
    """
    try:
        outcome = await strategy.authenticate(login_data.username, login_data.password)
    except PyMongoError as e:
        logger.error(f"Database error during /login for {login_data.username}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An internal error occurred.")

    if not outcome.authenticated:
        # The specific reason stays in the server log
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Incorrect username or password.")

    token = token_service.issue(outcome.user.token_claims())
    return LoginResponse(user=outcome.user, token=token)
