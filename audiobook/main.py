"""FastAPI application entry point."""

import json
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from audiobook.api import auth, books, uploads, users
from audiobook.config import get_settings
from audiobook.database import Database
from audiobook.exceptions import AudiobookError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Tests may install their own handle before startup
    database = getattr(app.state, "database", None)
    owns_database = database is None
    if owns_database:
        database = Database(settings.database_url)
        database.connect()
        app.state.database = database
    logger.info(f"Audiobook API starting ({settings.environment})")
    yield
    if owns_database:
        database.close()
        del app.state.database


class RequestBodyCaptureMiddleware:
    """Keeps a copy of JSON request bodies on ``request.state`` for error reports.

    Other bodies (multipart uploads in particular) are passed through untouched.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not _is_json(scope):
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["raw_body"] = b""

        async def capturing_receive():
            message = await receive()
            if message["type"] == "http.request":
                state["raw_body"] += message.get("body", b"")
            return message

        await self.app(scope, capturing_receive, send)


def _is_json(scope) -> bool:
    for name, value in scope.get("headers", []):
        if name == b"content-type":
            return b"application/json" in value.lower()
    return False


def _captured_body(request: Request):
    raw_body = getattr(request.state, "raw_body", b"")
    if not raw_body:
        return None
    try:
        return json.loads(raw_body)
    except ValueError:
        return raw_body.decode("utf-8", errors="replace")


app = FastAPI(
    title="Audiobook API",
    description="Audiobook catalog, playback progress and recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestBodyCaptureMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AudiobookError)
async def audiobook_error_handler(request: Request, exc: AudiobookError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path} "
        f"body={_captured_body(request)!r}",
        exc_info=exc,
    )
    content = {"detail": "Internal server error"}
    if not settings.is_production:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# Register routers
app.include_router(auth.router)
app.include_router(uploads.router)
app.include_router(books.router)
app.include_router(users.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
