"""
Task Tracker API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.health import router as health_router
from api.middleware import register_middleware
from api.tasks import router as tasks_router
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import create_engine, create_schema, create_session_factory
from database.stores import CredentialStore, SqlCredentialStore, SqlTaskStore, TaskStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    credential_store: Optional[CredentialStore] = None,
    task_store: Optional[TaskStore] = None,
) -> FastAPI:
    """
    Build the application.

    Stores passed in are used as-is; otherwise SQLAlchemy stores are created
    against ``settings.database_url`` when the app starts up.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if credential_store is None or task_store is None:
            engine = create_engine(settings)
            if settings.db_create_schema:
                await create_schema(engine)
            session_factory = create_session_factory(engine)
            app.state.credential_store = credential_store or SqlCredentialStore(session_factory)
            app.state.task_store = task_store or SqlTaskStore(session_factory)
        else:
            app.state.credential_store = credential_store
            app.state.task_store = task_store
        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            if engine is not None:
                await engine.dispose()

    app = FastAPI(
        title="Task Tracker API",
        version="1.0.0",
        description="Authenticated per-user task tracking.",
        lifespan=lifespan,
    )
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(tasks_router)

    return app


configure_logging(config)
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
