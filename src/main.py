"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api import router, search_router
from src.db.session import dispose_engine
from src.errors import PostNotFoundError, StoreUnavailableError, UserNotFoundError
from src.taskiq_app.broker import broker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Initialize and close Taskiq broker for API process only."""

    if not broker.is_worker_process:
        await broker.startup()
    yield
    if not broker.is_worker_process:
        await broker.shutdown()
    await dispose_engine()


app = FastAPI(title="abraje-immo", lifespan=lifespan)
app.include_router(search_router)
app.include_router(router)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(
    _: Request, exc: StoreUnavailableError
) -> JSONResponse:
    logger.warning("Returning 503: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(PostNotFoundError)
@app.exception_handler(UserNotFoundError)
async def not_found_handler(
    _: Request, exc: PostNotFoundError | UserNotFoundError
) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, str]:
    """Basic health endpoint."""

    return {"status": "ok"}
