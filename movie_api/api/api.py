"""
API Router Module - Aggregates all endpoint routers
"""
from fastapi import APIRouter

from movie_api.api.endpoints import auth, movies, users

api_router = APIRouter()

api_router.include_router(auth.router, tags=["Auth"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(movies.router, prefix="/movies", tags=["Movies"])
