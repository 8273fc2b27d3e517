# config.py
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

# Base URLs for the upstream services
UPSTREAM_BASE_URL = "https://api-otakudesu-livid.vercel.app"
STORE_BASE_URL = "http://nue-db.vercel.app"
STORE_COLLECTION = "nuenime1"

# Cache data for 24 hours
DEFAULT_CACHE_TTL = 86400
DEFAULT_PAGE_SIZE = 10
DEFAULT_PORT = 3000

SUPPORTED_SOURCES = {'api', 'store'}


class Settings(BaseModel):
    host: str = Field("0.0.0.0", description="Interface to listen on")
    port: int = Field(DEFAULT_PORT, description="Port to listen on")
    source: str = Field("api", description="Deployment variant: 'api' or 'store'")
    upstream_base_url: str = Field(UPSTREAM_BASE_URL, description="Base URL of the anime API")
    store_base_url: str = Field(STORE_BASE_URL, description="Base URL of the JSON store")
    store_collection: str = Field(STORE_COLLECTION, description="Collection holding anime records")
    cache_ttl: float = Field(DEFAULT_CACHE_TTL, gt=0, description="Cache time-to-live in seconds")
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, description="Items per listing page")
    log_level: str = Field("INFO", description="Logging level name")

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        source = env.get("ANIME_SOURCE", "api").strip().lower()
        if source not in SUPPORTED_SOURCES:
            raise ValueError(f"Invalid ANIME_SOURCE. Supported sources: {', '.join(sorted(SUPPORTED_SOURCES))}")
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT") or DEFAULT_PORT),
            source=source,
            upstream_base_url=env.get("UPSTREAM_BASE_URL", UPSTREAM_BASE_URL).rstrip('/'),
            store_base_url=env.get("STORE_BASE_URL", STORE_BASE_URL).rstrip('/'),
            store_collection=env.get("STORE_COLLECTION", STORE_COLLECTION),
            cache_ttl=float(env.get("CACHE_TTL_SECONDS") or DEFAULT_CACHE_TTL),
            page_size=int(env.get("PAGE_SIZE") or DEFAULT_PAGE_SIZE),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
