from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.batch import build_default_batch_decoder


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    batch_decoder = build_default_batch_decoder()
    try:
        yield
    finally:
        batch_decoder.shutdown()
        build_default_batch_decoder.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Advertisement Decoder",
        description="Decodes full and cut sensor advertisement payloads into typed readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
