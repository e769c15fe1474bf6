# storefront/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import Settings, get_settings
from storefront.database import create_db_and_tables, make_engine
from storefront.seed import seed_catalog

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import user as _user_models  # noqa: F401
from storefront.models import product as _product_models  # noqa: F401
from storefront.models import cart as _cart_models  # noqa: F401

# Routers
from storefront.routers.auth import router as auth_router
from storefront.routers.products import router as products_router
from storefront.routers.cart import router as cart_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create tables.
      - Seed the sample catalog when enabled and the catalog is empty.

    Shutdown:
      - Dispose the engine's connection pool.
    """
    settings: Settings = app.state.settings
    engine = app.state.engine
    logger.info("Startup: connecting to %s", engine.url.render_as_string(hide_password=True))
    try:
        create_db_and_tables(engine)
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise

    if settings.SEED_CATALOG:
        seed_catalog(engine)

    yield

    engine.dispose()


def _format_validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        # drop the "body"/"query"/"path" prefix
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg")})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed or missing input is a 400 with field-level messages."""
        errors = _format_validation_errors(exc)
        detail = "; ".join(
            f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": detail or "Invalid request", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"detail": "Internal server error"}
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    The engine and settings are constructed here and stored on
    `app.state`; dependencies read them from the request instead of
    module globals.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = make_engine(settings)

    register_exception_handlers(app)

    # --- CORS configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_and_harden(request: Request, call_next):
        started = time.perf_counter()
        client = request.client.host if request.client else "unknown"
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms) client=%s",
            request.method, request.url.path, response.status_code, elapsed_ms, client,
        )
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # API prefix, e.g. /api
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(cart_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root():
        """API index."""
        prefix = settings.API_PREFIX
        return {
            "service": "paint-shop-storefront",
            "status": "active",
            "version": app.version,
            "endpoints": {
                "health": f"{prefix}/health",
                "db_status": f"{prefix}/db-status",
                "products": f"{prefix}/products",
                "auth": f"{prefix}/auth",
                "cart": f"{prefix}/cart",
            },
        }

    @app.get(f"{settings.API_PREFIX}/health")
    def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get(f"{settings.API_PREFIX}/db-status")
    def db_status():
        """Run a trivial query to check the database is reachable."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            with app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("DB status check failed: %s", e)
            content = {
                "status": "error",
                "message": "Database connection failed",
                "timestamp": now,
            }
            if not settings.is_production:
                content["error"] = str(e)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=content,
            )

        return {
            "status": "connected",
            "message": "Database connection OK",
            "timestamp": now,
        }

    return app


app = create_app()
