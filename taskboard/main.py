import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .database import Database
from .exceptions import (
    TaskboardError,
    taskboard_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .routers import auth, tasks, users

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database

    logger.info(f"Starting Taskboard API against {database.engine.url.render_as_string(hide_password=True)}")
    database.create_tables()

    yield

    logger.info("Shutting down Taskboard API")
    database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit configuration.

    Without an argument the settings come from the environment, which
    must provide SECRET_KEY.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = FastAPI(
        title="Taskboard API",
        description="Personal task lists behind bearer-token authentication",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings.database_url)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskboardError, taskboard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(auth.router, tags=["auth"])
    app.include_router(users.router, tags=["users"])
    app.include_router(tasks.router, tags=["tasks"])

    @app.get("/")
    def read_root():
        return {"message": "Server is running!"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app
