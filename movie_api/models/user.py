# movie_api/models/user.py

import re
from datetime import date, datetime
from typing import Annotated, Any, List, Optional

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

USERNAME_MIN_LENGTH = 3
_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]+")


def validate_username(value: str) -> str:
    if len(value) < USERNAME_MIN_LENGTH:
        raise ValueError(f"Username is required (at least {USERNAME_MIN_LENGTH} characters).")
    if not _ALPHANUMERIC.fullmatch(value):
        raise ValueError("Username contains non alphanumeric characters - not allowed.")
    return value


def validate_password(value: str) -> str:
    if not value.strip():
        raise ValueError("Password is required")
    return value


Username = Annotated[str, AfterValidator(validate_username)]
Password = Annotated[str, AfterValidator(validate_password)]


# --- Request Bodies ---
class UserCreate(BaseModel):
    """Body of POST /users."""
    username: Username = Field(..., description="Unique, alphanumeric, at least 3 characters.")
    password: Password = Field(..., description="Plaintext password; stored hashed.")
    email: EmailStr
    birthday: Optional[date] = None


class UserUpdate(BaseModel):
    """
    Body of PUT /users/{username}.

    Omitting password (or sending null) leaves the stored hash untouched; any
    supplied value is hashed. favoriteMovies replaces the list only when given.
    """
    username: Username
    password: Optional[Password] = None
    email: EmailStr
    birthday: Optional[date] = None
    favoriteMovies: Optional[List[str]] = None

    @field_validator("favoriteMovies")
    @classmethod
    def check_movie_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        invalid = [mid for mid in v if not ObjectId.is_valid(mid)]
        if invalid:
            raise ValueError(f"Invalid movie id(s): {', '.join(invalid)}")
        return v


# --- Model for API Responses ---
class UserRead(BaseModel):
    """User as returned by the API. password is always the stored hash."""
    id: str = Field(..., description="Internal database ID (MongoDB ObjectId as string).")
    username: str
    password: str
    email: str
    birthday: Optional[date] = None
    favoriteMovies: List[str] = Field(default_factory=list, description="IDs of favorite movies, in insertion order.")

    @field_validator("birthday", mode="before")
    @classmethod
    def coerce_birthday(cls, v: Any) -> Any:
        # Mongo stores dates as datetimes
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("favoriteMovies", mode="before")
    @classmethod
    def stringify_movie_ids(cls, v: Any) -> Any:
        if v is None:
            return []
        return [str(mid) for mid in v]

    @classmethod
    def from_doc(cls, doc: dict) -> "UserRead":
        return cls(id=str(doc["_id"]), **doc)

    def token_claims(self) -> dict:
        """Serialized fields embedded in a bearer token (the hash stays out)."""
        return self.model_dump(mode="json", exclude={"password"})
