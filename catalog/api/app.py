"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``), initialises the schema and builds the
configured content store (``request.app.state.store``).  On shutdown both are
closed cleanly.

Routers
-------
    /          public listings, detail pages, genre + search, visit dashboard
    /admin     content and link CRUD
    /visits    visit tracking and analytics
    /file      download-token redirector
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.config import Settings, settings as default_settings
from catalog.db import get_connection, init_db, open_content_store
from catalog.errors import NotFoundError, StorageError, ValidationError
from catalog.logging_setup import configure_logging

from catalog.api.routers import admin as admin_router
from catalog.api.routers import content as content_router
from catalog.api.routers import download as download_router
from catalog.api.routers import visits as visits_router

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    cfg = app_settings or default_settings
    configure_logging(cfg.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the DB and content store on startup, close them on shutdown."""
        conn = get_connection(cfg.db_path)
        init_db(conn)
        app.state.db = conn
        app.state.store = open_content_store(cfg, conn)
        logger.info("Catalog ready (backend=%s, db=%s)", cfg.backend, cfg.db_path)
        try:
            yield
        finally:
            app.state.store.close()
            conn.close()

    app = FastAPI(
        title="Catalog Hub API",
        description=(
            "Movie and web-series catalogue: public listings and search, "
            "admin content / link CRUD, a download-token redirector and "
            "visit analytics."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    app.include_router(admin_router.router, prefix="/admin", tags=["admin"])
    app.include_router(download_router.router, prefix="/file", tags=["download"])
    app.include_router(visits_router.router, prefix="/visits", tags=["visits"])
    app.include_router(content_router.router, tags=["content"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn catalog.api.app:app --reload
app = create_app()
