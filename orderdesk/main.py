# orderdesk/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from sqlmodel import Session

from orderdesk.core.config import Settings, get_settings
from orderdesk.core.errors import register_exception_handlers
from orderdesk.core.migrations import run_migrations
from orderdesk.database import create_db_engine
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.services.reference_service import ReferenceService

# Routers
from orderdesk.routers.orders import router as orders_router
from orderdesk.routers.references import router as references_router

logger = logging.getLogger("uvicorn")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    `settings` defaults to the environment-backed settings; tests pass
    their own (e.g. a temporary DATABASE_URL).
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Owns the database engine for the life of the app.

        Startup:
          - Open the database engine.
          - Apply pending migrations.
          - Seed the default city into an empty cities table.

        Shutdown:
          - Dispose the engine (closes pooled connections).
        """
        logger.info("Startup: opening database %s", settings.DATABASE_URL)
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
        try:
            run_migrations(engine)
            with Session(engine) as session:
                ReferenceService(LocationRepository()).seed_default_city(
                    session, settings.DEFAULT_CITY
                )
        except Exception as e:
            logger.error("Startup: database initialization FAILED: %s", e)
            engine.dispose()
            raise
        app.state.engine = engine
        logger.info("Startup: database ready.")
        yield
        engine.dispose()
        logger.info("Shutdown: database engine disposed.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Versioned API prefix, e.g. /api/v1
    app.include_router(orders_router, prefix=settings.API_V1_STR)
    app.include_router(references_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "orderdesk-backend"}

    return app


app = create_app()
