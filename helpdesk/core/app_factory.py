from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..application.services.auth_service import AuthService
from ..application.services.password_hasher import PasswordHasher
from ..application.services.ticket_service import TicketService
from ..application.services.token_service import TokenService
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.errors import ErrorResponder, register_error_handlers
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import tickets as tickets_router
from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Helpdesk API", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(tickets_router.router)
    register_error_handlers(app, ErrorResponder(verbose=settings.verbose_errors))

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def _create_lifespan(settings: Settings):
    token_service = TokenService(
        secret_key=settings.token_secret,
        expires_in=timedelta(hours=settings.token_exp_hours),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        persistence = SQLitePersistence(settings.database_path)
        password_hasher = PasswordHasher()
        container = ApplicationContainer(
            settings=settings,
            persistence=persistence,
            password_hasher=password_hasher,
            token_service=token_service,
            auth_service=AuthService(persistence, password_hasher, token_service),
            ticket_service=TicketService(persistence),
        )
        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Helpdesk API started in %s mode", settings.app_env)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
