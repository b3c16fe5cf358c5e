import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_TIMEOUT_MS = 30000


class ClientConfig(BaseModel):
    """Configuration of one ShopScript client instance (one backend origin)."""

    base_url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    connect_timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    receive_timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    token_file: Optional[Path] = None
    log_level: str = "INFO"

    # Validate that the base URL is an http(s) origin, stored without trailing slash
    @field_validator("base_url")
    @classmethod
    def must_be_http_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def must_be_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @property
    def connect_timeout(self) -> float:
        """Connect timeout in seconds."""
        return self.connect_timeout_ms / 1000

    @property
    def receive_timeout(self) -> float:
        """Receive timeout in seconds."""
        return self.receive_timeout_ms / 1000

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None, **overrides) -> "ClientConfig":
        """
        Build a config from SHOPSCRIPT_* environment variables.

        Variables in `env_file` (default: .env in the working directory) are
        loaded first; variables already set in the environment take precedence.

        Raises:
            ValueError: If SHOPSCRIPT_BASE_URL is not set
        """
        load_dotenv(dotenv_path=env_file or Path.cwd() / ".env")

        values = {
            "base_url": os.getenv("SHOPSCRIPT_BASE_URL"),
            "connect_timeout_ms": os.getenv("SHOPSCRIPT_CONNECT_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)),
            "receive_timeout_ms": os.getenv("SHOPSCRIPT_RECEIVE_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)),
            "token_file": os.getenv("SHOPSCRIPT_TOKEN_FILE") or None,
            "log_level": os.getenv("SHOPSCRIPT_LOG_LEVEL", "INFO"),
        }
        values.update(overrides)

        if not values["base_url"]:
            raise ValueError(
                "Missing required environment variable: SHOPSCRIPT_BASE_URL\n"
                "Please check your .env file and ensure it points at your store."
            )
        return cls(**values)
