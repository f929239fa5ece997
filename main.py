import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import Settings, get_settings
from db import build_engine, create_db_and_tables
from errors import envelope, register_exception_handlers
from logging_config import RequestLoggingMiddleware, setup_logging
from models import utcnow
from routers import accounts, auth, donations, requests
from security import TokenSigner
from storage import LocalFileStorage

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Settings are injected here and live on app.state
    together with the engine, the token signer and the upload storage.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    storage = LocalFileStorage(settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES)
    storage.connect()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_db_and_tables(engine)
        logger.info("%s API started", settings.APP_NAME)
        yield
        engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.tokens = TokenSigner(settings.SECRET_KEY, settings.TOKEN_EXPIRE_SECONDS)
    app.state.storage = storage

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "message": f"{settings.APP_NAME} API is running",
            "timestamp": utcnow().isoformat(),
        }

    @app.get("/")
    def read_root():
        return envelope(True, f"{settings.APP_NAME} API")

    app.include_router(auth.router)
    app.include_router(accounts.router, prefix="/accounts")
    app.include_router(donations.router, prefix="/donations")
    app.include_router(requests.router, prefix="/requests")

    return app
