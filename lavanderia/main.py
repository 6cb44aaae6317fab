# lavanderia/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi.errors import RateLimitExceeded

from lavanderia.api.v1 import api_router
from lavanderia.core.config import Settings, get_settings
from lavanderia.core.database import MongoDbContext, set_mongo_manager
from lavanderia.core.exceptions import exception_handlers
from lavanderia.core.logging_config import add_trace_id_middleware, setup_logging
from lavanderia.core.rate_limit import limiter, rate_limit_exceeded_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.PROJECT_NAME}...")
    mongo = MongoDbContext(settings.MONGODB_URI, settings.mongodb_db_name)
    await mongo.connect()
    set_mongo_manager(mongo)
    try:
        yield
    finally:
        logger.info("Shutting down...")
        await mongo.disconnect()
        set_mongo_manager(None)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
        exception_handlers={**exception_handlers, RateLimitExceeded: rate_limit_exceeded_handler},
    )
    app.state.settings = settings
    app.state.limiter = limiter

    app.middleware("http")(add_trace_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()
