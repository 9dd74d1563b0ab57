import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dropout_monitor.api.v1 import students
from dropout_monitor.core.config import RiskConfig, Settings, settings
from dropout_monitor.core.database import (
    SessionLocal,
    build_engine,
    build_session_factory,
    engine,
    init_db,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info("Database schema ready")
    yield


def create_app(
    app_settings: Settings | None = None,
    risk_config: RiskConfig | None = None,
) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        description="Dropout risk evaluation for student activity records",
        version="1.0.0",
        lifespan=lifespan,
    )

    if app_settings.DATABASE_URL == settings.DATABASE_URL:
        app.state.engine = engine
        app.state.session_factory = SessionLocal
    else:
        app.state.engine = build_engine(app_settings.DATABASE_URL)
        app.state.session_factory = build_session_factory(app.state.engine)

    # Thresholds are fixed for the life of the process
    app.state.risk_config = risk_config or RiskConfig.from_settings(app_settings)
    logger.info("Risk thresholds: %s", app.state.risk_config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok"}

    # API Routers
    app.include_router(students.router, prefix=app_settings.API_PREFIX, tags=["Students"])

    return app


app = create_app()
