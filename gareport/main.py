import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gareport.api.config import get_settings, reload_settings
from gareport.api.routes import query, reports
from gareport.api.services.query_engine import reset_service
from gareport.api.transport import clear_transports

_settings = get_settings()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", _settings.logging.level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)
logger.info(
    "Startup diagnostics: api=%s token_set=%s jobs_backend=%s",
    _settings.analytics.base_url,
    bool(_settings.analytics.access_token),
    _settings.jobs.backend,
)

app = FastAPI(title="Analytics Reporting Service", version="0.1.0")

# CORS: allow frontend dev origins (override with CORS_ORIGINS)
default_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

env_origins = os.environ.get("CORS_ORIGINS", "").strip()
allowed_origins = (
    [o.strip() for o in env_origins.split(",") if o.strip()] if env_origins else default_origins
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(query.router, prefix="/api")
app.include_router(reports.router, prefix="/api")


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}


@app.post("/admin/reload-config", tags=["system"])
async def admin_reload_config() -> dict:
    """Reload config.yml and rebuild the transport and service (no auth for dev)."""
    settings = reload_settings()
    clear_transports()
    reset_service()
    return {
        "reloaded": True,
        "api": settings.analytics.base_url,
        "token_set": bool(settings.analytics.access_token),
    }
