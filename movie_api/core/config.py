# Settings management (reads env vars/.env)
# movie_api/core/config.py

import json
import logging
from functools import lru_cache
from typing import Annotated, List, Union

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "your_jwt_secret"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:8080",
    "http://localhost:1234",
    "http://localhost:4200",
    "https://movie-api-zy6n.onrender.com",
    "https://myflixone.netlify.app",
    "https://hantaray.github.io",
]


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables or a .env file.

    Instances are frozen: the app factory receives one at startup and nothing
    mutates it afterwards.
    """
    # --- Project Info ---
    PROJECT_NAME: str = Field("Movie API", validation_alias="PROJECT_NAME")
    VERSION: str = Field("1.0.0", validation_alias="APP_VERSION")

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", validation_alias="LOG_LEVEL")

    # --- Database (MongoDB) ---
    # SecretStr keeps credentials embedded in the URI out of logs
    MONGODB_URI: SecretStr = Field(
        SecretStr("mongodb://localhost:27017/movie_api"),
        validation_alias=AliasChoices("CONNECTION_URI", "MONGODB_URI"),
    )
    MONGODB_DB_NAME: str = Field(
        "movie_api",
        validation_alias="MONGODB_DB_NAME",
        description="Used when the connection URI does not name a database.",
    )

    # --- Authentication (JWT) ---
    JWT_SECRET: SecretStr = Field(SecretStr(DEFAULT_JWT_SECRET), validation_alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field("HS256", validation_alias="JWT_ALGORITHM")
    JWT_EXPIRES_DAYS: int = Field(7, ge=1, validation_alias="JWT_EXPIRES_DAYS")
    PASSWORD_HASH_ROUNDS: int = Field(10, ge=4, le=31, validation_alias="PASSWORD_HASH_ROUNDS")

    # --- CORS ---
    # Comma-separated string ("http://a,http://b") or a JSON list
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=DEFAULT_CORS_ORIGINS,
        validation_alias="BACKEND_CORS_ORIGINS",
    )

    # --- Server ---
    HOST: str = Field("0.0.0.0", validation_alias="HOST")
    PORT: int = Field(8080, validation_alias="PORT")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        raise ValueError(f"Invalid BACKEND_CORS_ORIGINS format: {v}")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Returns the application settings instance, loading it on first use."""
    logger.info("Attempting to load application settings...")
    try:
        settings_instance = Settings()
    except Exception as e:
        logger.critical(f"CRITICAL ERROR: Failed to load application settings: {e}", exc_info=True)
        raise RuntimeError(f"Could not load settings: {e}") from e

    logger.info(f"Settings loaded successfully for Project: {settings_instance.PROJECT_NAME}")
    logger.info(f"Log Level: {settings_instance.LOG_LEVEL}")
    logger.info(f"CORS Origins: {settings_instance.BACKEND_CORS_ORIGINS}")
    if settings_instance.JWT_SECRET.get_secret_value() == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; using the development default. Do not run this in production.")
    return settings_instance
