from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AnalyticsConfig(BaseModel):
    base_url: str = Field(default="https://www.googleapis.com/analytics/v3")
    access_token: Optional[str] = Field(default=None)
    timeout_seconds: float = Field(default=30.0, gt=0)
    # The reporting API caps a page at 10k rows.
    default_max_results: int = Field(default=10000, ge=1, le=10000)


class CacheConfig(BaseModel):
    ttl_seconds: int = Field(default=300, ge=1)
    max_size: int = Field(default=256, ge=1)


class JobsConfig(BaseModel):
    # 'memory' (default) or 'redis'.
    backend: str = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    namespace: str = Field(default="unsampled_reports")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")


class Settings(BaseModel):
    analytics: AnalyticsConfig = AnalyticsConfig()
    cache: CacheConfig = CacheConfig()
    jobs: JobsConfig = JobsConfig()
    logging: LoggingConfig = LoggingConfig()


_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def _interpolate(obj):
    if isinstance(obj, dict):
        return {key: _interpolate(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_interpolate(value) for value in obj]
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda match: os.getenv(match.group(1), match.group(0)), obj)
    return obj


def _load_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return _interpolate(raw)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    config_path = Path(os.getenv("CONFIG_PATH", Path.cwd() / "config.yml"))
    settings = Settings.model_validate(_load_yaml_config(config_path))
    if settings.analytics.access_token and settings.analytics.access_token.startswith("${"):
        logger.warning(
            "analytics.access_token still references %s; is the environment variable set?",
            settings.analytics.access_token,
        )
    return settings


def reload_settings() -> Settings:
    """Invalidate cache and reload settings, useful after editing config.yml."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
    return get_settings()
