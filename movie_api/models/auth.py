from pydantic import BaseModel

from movie_api.models.user import UserRead


class UserLogin(BaseModel):
    """Credentials submitted to POST /login"""
    username: str
    password: str


class LoginResponse(BaseModel):
    """Response after a successful login: the user and a bearer token"""
    user: UserRead
    token: str
