# beautyshelf/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from beautyshelf.config import Settings, get_settings
from beautyshelf.core.errors import ServiceError
from beautyshelf.db.factory import build_backend
from beautyshelf.api.routes import auth as auth_routes
from beautyshelf.api.routes import debug as debug_routes
from beautyshelf.api.routes import kanban as kanban_routes
from beautyshelf.api.routes import photos as photo_routes
from beautyshelf.api.routes import products as product_routes
from beautyshelf.api.routes import storage as storage_routes
from beautyshelf.api.routes import suggestions as suggestion_routes
from beautyshelf.middleware.cors_config import configure_cors
from beautyshelf.middleware.security_headers import add_security_headers
from beautyshelf.services.buckets import BucketCache, BucketResolver
from beautyshelf.services.debug_log import PhotoDebugLog

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: run startup checks before the app starts serving.
    Checks only log; a missing bucket or table must not stop the API.
    """
    settings: Settings = app.state.settings
    backend = app.state.backend
    logger.info("Starting BeautyShelf API (env=%s, backend=%s)", settings.ENV, backend.name)

    if backend.name == "file":
        products_path = backend.db._file_path("products")
        if not products_path.exists():
            logger.info("Products file not found at %s; it will be created on first insert", products_path)
        else:
            logger.info("Found products file: %s", products_path)

    try:
        bucket = app.state.bucket_cache.get_or_resolve(BucketResolver(backend.storage))
        if bucket:
            logger.info("Using photo bucket: %s", bucket)
        else:
            logger.warning("No photo bucket found; POST /api/storage/setup creates '%s'", settings.DEFAULT_BUCKET)
    except ServiceError as e:
        logger.warning("Storage check failed at startup: %s", e.message)

    yield
    logger.info("Shutting down BeautyShelf API")


def create_app(settings: Optional[Settings] = None, ai_client_factory: Optional[Callable[[], Any]] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    app = FastAPI(title="BeautyShelf API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = build_backend(settings)
    app.state.bucket_cache = BucketCache()
    app.state.debug_log = PhotoDebugLog(enabled=settings.photo_debug_enabled)
    app.state.ai_client_factory = ai_client_factory

    configure_cors(app, settings.cors_origins)
    add_security_headers(app)

    # local backend: uploaded photos are served from the storage directory
    if app.state.backend.name == "file":
        settings.STORAGE_DIR.mkdir(parents=True, exist_ok=True)
        app.mount("/storage", StaticFiles(directory=str(settings.STORAGE_DIR)), name="storage")

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "internal_error", "detail": "Something went wrong. Please try again."},
        )

    app.include_router(auth_routes.router)
    app.include_router(product_routes.router)
    app.include_router(photo_routes.router)
    app.include_router(storage_routes.router)
    app.include_router(kanban_routes.router)
    app.include_router(suggestion_routes.router)
    if settings.is_development:
        app.include_router(debug_routes.router)

    @app.get("/", tags=["root"])
    async def root():
        return {"status": "ok", "service": "BeautyShelf API", "backend": app.state.backend.name}

    return app


app = create_app()
