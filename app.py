from __future__ import annotations

import contextlib
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rebridge import Rebridge
from rebridge.endpoints import router as documents_router
from rebridge.settings import get_settings
from rebridge.stores import create_store

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # close_store is only set when create_app built the store itself
    close = getattr(app.state, "close_store", None)
    if close is not None:
        await close()


def create_app(db: Rebridge | None = None) -> FastAPI:
    load_dotenv("local.env")

    close_store = None
    if db is None:
        settings = get_settings()
        store = create_store(settings)
        close_store = getattr(store, "close", None)
        db = Rebridge(
            store,
            settings.namespace,
            optimistic=settings.optimistic,
            max_retries=settings.max_retries,
        )

    app = FastAPI(lifespan=lifespan)
    app.state.rebridge = db
    app.state.close_store = close_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents_router)

    logger.info("rebridge app ready: %r", db)
    return app


app = create_app()
