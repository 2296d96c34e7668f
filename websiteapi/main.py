import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from websiteapi.config import config as default_config
from websiteapi.database import create_database, create_schema
from websiteapi.errors import register_exception_handlers
from websiteapi.logging_conf import configure_logging
from websiteapi.models.form import isoformat_utc
from websiteapi.models.homepage import Health
from websiteapi.routers.website import router as website_router

logger = logging.getLogger(__name__)


def create_app(config=default_config) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config)
        if config.DB_CREATE_SCHEMA:
            create_schema(config.DATABASE_URL)
        database = create_database(config)
        # connect database
        await database.connect()
        app.state.database = database
        logger.info("Database connected.")
        try:
            yield
        finally:
            # disconnect database
            await database.disconnect()
            logger.info("Database disconnected.")

    app = FastAPI(
        title="Website Homepage API",
        description="Read-only API serving the published website homepage and its form structure",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_details=config.EXPOSE_ERROR_DETAILS)

    @app.get("/health", response_model=Health, status_code=200)
    async def health():
        return Health(status="OK", timestamp=isoformat_utc(datetime.now(timezone.utc)))

    app.include_router(website_router, prefix="/api/website", tags=["Website"])

    return app


app = create_app()
