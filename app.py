"""
Production-safe FastAPI application entrypoint.

No import-time side effects beyond logging setup. The JSON store location
comes from AGENDAY_DB_PATH (see workflows/io/database.py).

Run with: uvicorn app:app
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import os
import logging

# Configure logging (this is acceptable at import time - just sets up handlers)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _is_dev_mode() -> bool:
    """Check if running in development mode. Does NOT mutate environment."""
    env_value = os.getenv("ENV", "prod").lower()
    return env_value in ("dev", "development", "local")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log where bookings are stored; nothing to tear down."""
    from workflows.io.database import default_db_path

    db_path = default_db_path()
    logger.info("[Backend] Booking store: %s", db_path)
    if not db_path.exists():
        logger.warning("[Backend] Booking store does not exist yet; it will be created on first write")
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Safe to call multiple times (e.g., for testing).
    """
    is_dev = _is_dev_mode()

    app = FastAPI(title="Agenday Booking Confirmation", lifespan=lifespan)

    # Import routers (lazy import to avoid circular dependencies)
    from api.routes import appointments_router, conversations_router

    app.include_router(conversations_router)
    app.include_router(appointments_router)

    _configure_cors(app)
    _add_root_endpoint(app, is_dev)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware based on environment."""
    raw_origins = os.getenv("ALLOWED_ORIGINS")

    if raw_origins:
        allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
        # "*" cannot be combined with allow_credentials=True
        allowed_origins = [o for o in allowed_origins if o != "*"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        # Dev default: localhost dashboards
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def _add_root_endpoint(app: FastAPI, is_dev: bool) -> None:
    """Add root health check endpoint."""

    @app.get("/")
    async def root():
        """Root health check endpoint.

        In dev mode, includes store counts for debugging.
        """
        if is_dev:
            from workflows.io.database import load_db

            database = load_db()
            return {
                "status": "Agenday Booking Confirmation Running",
                "conversations": len(database["conversations"]),
                "appointments": len(database["appointments"]),
            }
        return {"status": "ok"}


# This is what gets imported by uvicorn (e.g., uvicorn app:app)
app = create_app()
