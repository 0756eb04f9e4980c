import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.database import Base, engine
from core.errors import register_exception_handlers
from core.logging import RequestLoggingMiddleware, setup_logging
from routers import (
    auth as auth_router,
    cards as cards_router,
    decks as decks_router,
    share as share_router,
    study as study_router,
    system as system_router,
    users as users_router,
)

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from models import card, deck, deck_share, refresh_token, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Schema ready on %s", engine.url.render_as_string(hide_password=True))
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

    origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    for router in (
        auth_router.router,
        users_router.router,
        decks_router.router,
        cards_router.router,
        study_router.router,
        share_router.router,
        system_router.router,
    ):
        app.include_router(router, prefix=API_PREFIX)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", reload=True, host="127.0.0.1", port=8000)
