"""Configuration management for the FINRA client.

This module defines the ``FinraConfig`` model and helpers to load configuration
from environment variables (optionally via a local ``.env`` file).
"""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Load variables from a local .env file for development convenience
load_dotenv()


class FinraConfig(BaseModel):
    """Configuration values required to talk to the FINRA data API."""

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    use_mock_datasets: bool = False
    verify_ssl: bool = True
    timeout_ms: int = Field(default=30000, ge=1000, le=600000)

    @property
    def timeout_seconds(self) -> float:
        """Return the request timeout in seconds."""
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls) -> FinraConfig:
        """Build a configuration object from environment variables."""
        raw_config: dict[str, Any] = {
            "client_id": os.getenv("FINRA_CLIENT_ID"),
            "client_secret": os.getenv("FINRA_CLIENT_SECRET"),
        }
        # Optional settings fall back to model defaults when unset
        optional = {
            "use_mock_datasets": os.getenv("FINRA_USE_MOCK_DATASETS"),
            "verify_ssl": os.getenv("FINRA_VERIFY_SSL"),
            "timeout_ms": os.getenv("FINRA_TIMEOUT_MS"),
        }
        raw_config.update({key: value for key, value in optional.items() if value is not None})
        try:
            return cls(**raw_config)
        except ValidationError as exc:
            messages = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
            msg = f"Invalid FINRA configuration: {messages}"
            raise RuntimeError(msg) from exc


__all__ = ["FinraConfig"]
