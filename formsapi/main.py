import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from formsapi.config import BaseConfig, GlobalConfig, get_config
from formsapi.database import Store
from formsapi.errors import register_exception_handlers
from formsapi.logging_conf import configure_logging
from formsapi.routers.client import router as client_router
from formsapi.routers.field import router as field_router
from formsapi.routers.form import router as form_router
from formsapi.routers.public import router as public_router
from formsapi.routers.response import router as response_router

logger = logging.getLogger(__name__)


def create_app(config: GlobalConfig | None = None) -> FastAPI:
    config = config or get_config(BaseConfig().ENV_STATE)
    configure_logging(config.LOG_LEVEL)

    store = Store(
        config.DATABASE_URL,
        force_rollback=config.DB_FORCE_ROLL_BACK,
        wal=config.SQLITE_WAL,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # apply schema and connect database
        store.init_schema()
        await store.connect()
        logger.info(f"Connected to {config.DATABASE_URL}")
        yield
        # disconnect database
        await store.disconnect()

    app = FastAPI(
        title="Forms API",
        description="API for building forms, publishing them and collecting responses",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(form_router, prefix="/api/forms", tags=["Form"])
    app.include_router(field_router, prefix="/api/fields", tags=["Field"])
    app.include_router(client_router, prefix="/api/clients", tags=["Client"])
    app.include_router(response_router, prefix="/api/responses", tags=["Response"])
    app.include_router(public_router, prefix="/api/public", tags=["Public"])

    @app.get("/")
    async def root():
        return {"message": "Forms API"}

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()
