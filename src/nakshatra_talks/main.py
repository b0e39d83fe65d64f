"""Main module for the Nakshatra Talks consultation backend."""
import asyncio
import logging
import os
import subprocess
import sys
import time
from contextlib import asynccontextmanager, suppress
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nakshatra_talks.config import (HEARTBEAT_STALE_AFTER_SECONDS,
                                    HEARTBEAT_SWEEP_ENABLED,
                                    HEARTBEAT_SWEEP_INTERVAL_SECONDS,
                                    LOG_LEVEL)
from nakshatra_talks.db.sessions import engine, init_db
from nakshatra_talks.errors import (AppError, ErrorCode, code_for_status,
                                    error_body)
from nakshatra_talks.providers import SupabaseIdentityProvider
from nakshatra_talks.routers import (admin_router, astrologers_router,
                                     auth_router, chat_router, content_router,
                                     notifications_router, users_router,
                                     wallet_router)
from nakshatra_talks.schemas import ok
from nakshatra_talks.services.presence_sweep import run_presence_sweep
from nakshatra_talks.utils import utcnow

logger = logging.getLogger(__name__)
_STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Wire the engine and identity provider; run the presence sweep until shutdown."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    fastapi_app.state.engine = engine
    init_db(engine)

    identity_provider = SupabaseIdentityProvider()
    fastapi_app.state.identity_provider = identity_provider

    stop_event = asyncio.Event()
    sweep_task: asyncio.Task | None = None
    if HEARTBEAT_SWEEP_ENABLED:
        sweep_task = asyncio.create_task(
            run_presence_sweep(
                engine,
                HEARTBEAT_SWEEP_INTERVAL_SECONDS,
                HEARTBEAT_STALE_AFTER_SECONDS,
                stop_event,
            )
        )

    yield

    stop_event.set()
    if sweep_task is not None:
        with suppress(asyncio.CancelledError):
            await sweep_task
    try:
        await identity_provider.close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing provider %s: %s", type(identity_provider).__name__, exc)


app = FastAPI(
    title="Nakshatra Talks",
    description="Astrology consultation marketplace: sessions, per-minute billing and wallets",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorCode.VALIDATION_ERROR, "Validation failed", details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code_for_status(exc.status_code), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(ErrorCode.SERVER_ERROR, "Internal server error"),
    )


app.include_router(auth_router)
app.include_router(chat_router)
app.include_router(wallet_router)
app.include_router(astrologers_router)
app.include_router(users_router)
app.include_router(notifications_router)
app.include_router(content_router)
app.include_router(admin_router)


@app.get("/")
def root():
    """Service banner."""
    return ok({"name": app.title, "version": app.version}, "Nakshatra Talks API")


@app.get("/health")
def health():
    """Return health check status."""
    return ok(
        {
            "status": "ok",
            "timestamp": utcnow().isoformat(),
            "uptime": round(time.monotonic() - _STARTED_AT, 1),
        }
    )


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    uvicorn.run(
        "nakshatra_talks.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8001")),
    )


def run_dev():
    """Run the development server with Postgres running via Docker."""
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    uvicorn.run("nakshatra_talks.main:app", host="0.0.0.0", port=8000, reload=True)
