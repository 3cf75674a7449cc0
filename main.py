"""
Shopfront API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.documents import build_collection_router
from api.middleware import register_exception_handlers, register_middleware
from auth.jwt import TokenIssuer
from auth.routes import router as auth_router
from config.settings import Settings, get_settings
from database.session import Database

logger = logging.getLogger(__name__)

COLLECTIONS = (("products", "Product"), ("offers", "Offer"))


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio", "uvicorn.access"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    database = Database(settings.database_url, echo=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.start(create_tables=settings.create_tables)
        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            await database.stop()

    app = FastAPI(
        title="Shopfront API",
        version="1.0.0",
        description="Products/offers CRUD with username/password auth.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.token_issuer = TokenIssuer(
        settings.jwt_secret, expiry_seconds=settings.jwt_expiry_seconds
    )

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
    app.include_router(auth_router)
    for collection, label in COLLECTIONS:
        app.include_router(build_collection_router(collection, label))

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    config = get_settings()
    configure_logging(config.debug)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
