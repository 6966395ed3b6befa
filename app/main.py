import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import abstracts, admin, files, reviews
from app.core.config import Settings
from app.core.config import settings as default_settings
from app.core.errors import ConferenceError, StoreError
from app.core.logging import configure_logging
from app.db.session import create_db_engine, create_schema, create_session_factory
from app.services.bulk import BulkOperationExecutor
from app.services.review_aggregator import ReviewAggregator
from app.services.submission_store import SubmissionStore
from app.services.taxonomy import default_taxonomy

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_body(message: str, details=None) -> dict:
    body = {"error": message, "timestamp": _timestamp()}
    if details:
        body["details"] = details
    return body


def _install_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ConferenceError)
    async def conference_error_handler(request: Request, exc: ConferenceError):
        if isinstance(exc, StoreError) and not settings.debug:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            message = "Request timed out" if exc.status_code == 504 else "Internal server error"
            return JSONResponse(status_code=exc.status_code, content=_error_body(message))
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content=_error_body("Validation failed", details))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Route not found"
        return JSONResponse(status_code=exc.status_code, content=_error_body(message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if settings.debug else "Internal server error"
        return JSONResponse(status_code=500, content=_error_body(message))


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the abstracts API.

    Services hang off `app.state` and are created in the lifespan, so tests can
    pass their own Settings (database URL, limits) before the engine exists.
    """
    settings = settings or default_settings
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = create_db_engine(settings.database_url, echo=settings.db_echo)
        if settings.create_schema:
            await create_schema(engine)

        session_factory = create_session_factory(engine)
        store = SubmissionStore(session_factory, settings.db_timeout_seconds)
        app.state.engine = engine
        app.state.store = store
        app.state.reviews = ReviewAggregator(session_factory, settings.db_timeout_seconds)
        app.state.bulk = BulkOperationExecutor(store, max_ids=settings.bulk_max_ids)
        logger.info("%s started on %s", settings.app_name, engine.dialect.name)
        yield
        await engine.dispose()

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.taxonomy = default_taxonomy()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_exception_handlers(app, settings)

    app.include_router(abstracts.router)
    app.include_router(reviews.router)
    app.include_router(admin.router)
    app.include_router(files.router)

    @app.get("/health")
    async def health(request: Request):
        database = "connected"
        try:
            async with request.app.state.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Health check could not reach the database", exc_info=True)
            database = "unavailable"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "database": database,
            "timestamp": _timestamp(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
