from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from core import config, db
from core.errors import register_exception_handlers
from core.log import configure_logging
from posts import repository as posts_repository
from posts import router as posts_router

logger = logging.getLogger(__name__)


def log_routes(app: FastAPI) -> None:
    logger.info("Available routes:")
    for route in app.routes:
        if isinstance(route, APIRoute):
            logger.info("%s\t%s", ",".join(sorted(route.methods)), route.path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings is None:
        app.state.settings = config.load_settings()
    settings: config.Settings = app.state.settings
    configure_logging(settings.log_level)

    # Open the DB pool and ensure the schema once per process.
    await db.init_pool(settings, schema=posts_repository.SCHEMA)
    log_routes(app)
    try:
        yield
    finally:
        await db.close_pool()


def create_app(settings: config.Settings | None = None) -> FastAPI:
    app = FastAPI(title="posts-api", lifespan=lifespan)
    app.state.settings = settings

    # Any origin may call the API from a browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(posts_router.router, tags=["posts"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    try:
        settings = config.load_settings()
    except config.ConfigError as exc:
        configure_logging()
        logger.critical("startup_failed error=%s", exc)
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info("Server is listening on %s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
