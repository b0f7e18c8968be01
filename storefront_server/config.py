"""Configuration loaded from environment variables."""

import os

from pydantic import BaseModel, Field

DEFAULT_BACKEND_URL = "http://localhost:8000"


class Settings(BaseModel):
    """Storefront settings."""

    backend_url: str = Field(DEFAULT_BACKEND_URL, description="Shop backend base URL")
    timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    log_level: str = Field("INFO", description="Logging level name")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the environment.

        Reads STOREFRONT_BACKEND_URL, STOREFRONT_TIMEOUT and STOREFRONT_LOG_LEVEL,
        falling back to the defaults for any that are unset or empty.
        """
        values = {}
        backend_url = os.environ.get("STOREFRONT_BACKEND_URL")
        if backend_url:
            values["backend_url"] = backend_url.rstrip("/")
        timeout = os.environ.get("STOREFRONT_TIMEOUT")
        if timeout:
            values["timeout"] = timeout
        log_level = os.environ.get("STOREFRONT_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level.upper()
        return cls(**values)
