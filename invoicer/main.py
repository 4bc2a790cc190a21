import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invoicer.core import config
from invoicer.core.database import Base, engine
from invoicer.core.error_handlers import register_error_handlers
from invoicer.core.logging_setup import configure_logging
from invoicer.core.startup_checks import (
    ensure_migrations_applied,
    validate_database_environment,
    validate_security_settings,
)
from invoicer.middleware.observability import ObservabilityMiddleware
import invoicer.models  # models must be registered before create_all

from invoicer.routers.auth import router as auth_router
from invoicer.routers.customers import router as customers_router
from invoicer.routers.invoices import router as invoices_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Invoicer API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

register_error_handlers(app)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_security_settings()
        if config.DATABASE_URL.startswith("sqlite"):
            # dev/test only; real databases are managed by alembic
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(invoices_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
