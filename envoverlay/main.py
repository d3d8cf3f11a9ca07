"""HTTP admin service for the process-wide environment overlay."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from envoverlay.api import health, overlay
from envoverlay.core.config import config
from envoverlay.core.errors import OverlayError
from envoverlay.core.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from envoverlay.services.error_handler import ErrorHandler
from envoverlay.services.overlay import load_env_files


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if config.DEFAULT_ENV_FILES:
        load_env_files(config.DEFAULT_ENV_FILES)
    yield


app = FastAPI(title="Env Overlay", version="0.1.0", lifespan=lifespan)

app.include_router(health.router)
app.include_router(overlay.router)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ErrorHandlingMiddleware)


@app.exception_handler(OverlayError)
async def overlay_error_handler(request: Request, exc: OverlayError):
    return ErrorHandler.handle_exception(exc, request)
