import logging
import sqlite3
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pumpwork.adapters.sqlite.migrator import SQLiteMigrator
from pumpwork.api.deps import get_settings
from pumpwork.app_shell.config import ConfigurationError, validate_ops_rules
from pumpwork.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and migrate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        applied = SQLiteMigrator(settings.db_path).run_migrations()
    except (FileNotFoundError, ValueError, ConfigurationError, sqlite3.Error) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    logger.info(
        "Rules %s loaded, %d migration(s) applied", rules.project.rules_version, len(applied)
    )
    yield


app = FastAPI(
    title="Pumpwork API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from pumpwork.api.routes import (  # noqa: E402
    admin,
    applications,
    auth,
    categories,
    contracts,
    jobs,
    messages,
    profiles,
    reviews,
    service_requests,
    services,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])
app.include_router(services.router, prefix="/api/services", tags=["Services"])
app.include_router(applications.router, prefix="/api/applications", tags=["Applications"])
app.include_router(
    service_requests.router, prefix="/api/service-requests", tags=["Service Requests"]
)
app.include_router(contracts.router, prefix="/api/contracts", tags=["Contracts"])
app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
