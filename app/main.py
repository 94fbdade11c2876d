import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.auth import router as auth_router
from app.api.v1.clinic import router as clinic_router
from app.api.v1.appointment import router as appointment_router
from app.api.v1.patient import router as patient_router
from app.api.v1.hospital import router as hospital_router
from app.api.v1.followup import router as followup_router
from app.api.v1.stats import router as stats_router
from app.core.config import Settings, get_settings
from app.core.db import Database
from app.core.errors import register_exception_handlers
from app.core.log_middleware import LogMiddleware
from app.services.seed import seed_sample_data

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    database = database or Database(settings.database)
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.create_all()
        if settings.SEED_SAMPLE_DATA:
            try:
                async with database.sessionmaker() as session:
                    await seed_sample_data(session)
            except Exception:
                logger.exception("Error initializing sample data")
        logger.info("Application startup complete")
        yield
        await database.dispose()
        logger.info("DB engine disposed")

    app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database

    register_exception_handlers(app)
    app.add_middleware(LogMiddleware, timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(auth_router, prefix="/api")
    app.include_router(clinic_router, prefix="/api")
    app.include_router(appointment_router, prefix="/api")
    app.include_router(patient_router, prefix="/api")
    app.include_router(hospital_router, prefix="/api")
    app.include_router(followup_router, prefix="/api")
    app.include_router(stats_router, prefix="/api")

    @app.get("/api/health")
    async def health(request: Request):
        db_ok = await request.app.state.db.ping()
        return {"status": "ok", "database": "ok" if db_ok else "unavailable"}

    return app


app = create_app()
