"""
Primary FastAPI application entry point
"""
import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from movie_api.api.api import api_router
from movie_api.api.deps import close_connections, initialize_connections
from movie_api.core.config import Settings, get_settings
from movie_api.core.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Application startup: Initializing connections...")
    await initialize_connections(app)
    yield
    # Shutdown
    logger.info("Application shutdown: Closing connections...")
    await close_connections(app)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with one entry per failing field."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append({
            "location": loc[0] if loc else None,
            "param": ".".join(str(part) for part in loc[1:]) or None,
            "msg": msg,
        })
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"errors": errors}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return PlainTextResponse("Something broke!", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the application. Settings, the token service and the password
    hasher are created once here and shared read-only through app.state.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout,
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_service = TokenService(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expires_in=timedelta(days=settings.JWT_EXPIRES_DAYS),
    )
    app.state.password_hasher = PasswordHasher(rounds=settings.PASSWORD_HASH_ROUNDS)
    app.state.mongo_client = None
    app.state.db = None

    # Exact-match allow-list; requests without an Origin header are unaffected
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router)

    @app.get("/", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
    async def root():
        """Root endpoint to confirm the API is running."""
        return "Welcome to the Movie-API!"

    @app.get("/documentation", response_class=FileResponse, include_in_schema=False)
    async def documentation():
        return FileResponse(STATIC_DIR / "documentation.html", media_type="text/html")

    logger.info(f"App created with {len(app.routes)} routes")
    return app


app = create_app()


def main():
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    uvicorn.run("movie_api.server:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


# For local development
if __name__ == "__main__":
    main()
