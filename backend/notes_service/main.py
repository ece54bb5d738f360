import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from notes_service.config import Settings
from notes_service.exceptions import NoteServiceError
from notes_service.middleware.rate_limit import create_limiter
from notes_service.routers import notes
from notes_service.services.workspace import NoteRepository

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def configure_logging(level: str = "INFO") -> None:
    # Console logging to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
        force=True,
    )


async def note_service_error_handler(request: Request, exc: NoteServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Storage error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **exc.to_dict()},
    )


async def log_unhandled_exceptions(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(settings: Settings) -> FastAPI:
    repository = NoteRepository(settings.cache_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            repository.ensure_root()
        except OSError:
            logger.exception("Error creating cache directory", extra={"root": str(repository.root)})
        logger.info("Cache directory is set to %s", repository.root.resolve())
        yield

    app = FastAPI(title="Notes Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    limiter = create_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(NoteServiceError, note_service_error_handler)
    app.add_exception_handler(Exception, log_unhandled_exceptions)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(notes.build_router(limiter, settings.write_rate_limit))

    @app.get("/", response_class=PlainTextResponse)
    async def welcome() -> str:
        return "Welcome to the Notes Service"

    @app.get("/UploadForm.html", response_class=FileResponse)
    async def upload_form() -> FileResponse:
        return FileResponse(STATIC_DIR / "UploadForm.html", media_type="text/html")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
