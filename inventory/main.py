import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inventory.api import products
from inventory.config import Settings, settings as default_settings
from inventory.exceptions import InventoryError
from inventory.repositories.base import Storage
from inventory.repositories.memory import MemoryStorage
from inventory.repositories.sql import SqlStorage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> Storage:
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "sql":
        return SqlStorage(settings.DATABASE_URL)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r} (expected 'sql' or 'memory')")


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return ", ".join(parts)


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage: Storage = app.state.storage
    try:
        storage.init()
    except Exception as exc:
        # Refuse to serve without storage
        logger.critical("Storage backend %r unavailable: %s", storage.backend, exc)
        raise
    logger.info("%s started with %s storage", app.title, storage.backend)
    yield
    storage.close()


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        description="Product inventory, stock history and analytics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage or build_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _format_validation_errors(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Return JSON for unhandled exceptions so the frontend can parse the error."""
        logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
        content = {"message": "Internal server error"}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    app.include_router(products.router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok", "storage": app.state.storage.backend}

    return app


app = create_app()
