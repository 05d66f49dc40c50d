# movie_api/models/movie.py

from typing import List, Optional
from pydantic import BaseModel, Field


class Genre(BaseModel):
    """A genre embedded in a movie document."""
    name: Optional[str] = Field(None, description="Genre name, e.g. 'Drama'.")
    description: Optional[str] = Field(None, description="Short description of the genre.")


class Director(BaseModel):
    """The director embedded in a movie document."""
    name: Optional[str] = Field(None, description="Director's name.")
    bio: Optional[str] = Field(None, description="Short biography.")


# --- Base Model ---
class MovieBase(BaseModel):
    """Common attributes for a movie."""
    title: str = Field(..., description="Movie title.")
    description: str = Field(..., description="Synopsis of the movie.")
    genres: List[Genre] = Field(default_factory=list, description="Genres the movie belongs to.")
    director: Optional[Director] = Field(None, description="The movie's director.")
    imagePath: Optional[str] = Field(None, description="Link or path to the movie's poster image.")
    featured: bool = Field(False, description="Whether the movie is featured.")


# --- Model for API Responses ---
class MovieRead(MovieBase):
    """Movie returned by GET /movies and GET /movies/{movie}."""
    id: str = Field(..., description="Internal database ID (MongoDB ObjectId as string).")
