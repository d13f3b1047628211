"""
Configuration module for the raw HTTP adapter.
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .__version__ import __version__
from .models import BatchPolicy

_TRUTHY = {"1", "true", "yes", "on"}


class ClientConfig(BaseModel):
    """
    Adapter configuration.

    Supports environment variables through ``ClientConfig.from_env``:
    - RAW_HTTP_TIMEOUT: Default timeout in seconds (default: none)
    - RAW_HTTP_VERIFY_SSL: Verify TLS certificates (default: true)
    - RAW_HTTP_MAX_WORKERS: Thread pool size for batches (default: 8)
    - RAW_HTTP_BATCH_POLICY: "abort" or "collect" (default: abort)
    - RAW_HTTP_USER_AGENT: User-Agent for sessions created by the adapter
    - RAW_HTTP_CHUNK_SIZE: Chunk size when writing to a sink
    - RAW_HTTP_DEBUG: Enable debug logging
    """

    timeout: Optional[float] = Field(None, description="Default timeout in seconds")
    verify_ssl: bool = Field(True, description="Verify SSL certificates")
    max_workers: int = Field(8, description="Thread pool size for synchronous batches")
    batch_policy: BatchPolicy = Field(BatchPolicy.ABORT, description="Default batch policy")
    user_agent: str = Field(f"raw-http-adapter/{__version__}", description="User-Agent header")
    chunk_size: int = Field(65536, description="Sink write chunk size in bytes")
    debug: bool = Field(False, description="Enable debug logging")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("max_workers", "chunk_size")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build configuration from RAW_HTTP_* environment variables.

        Args:
            **overrides: Explicit values, taking precedence over the environment

        Returns:
            ClientConfig instance
        """
        values = {}

        timeout = os.getenv("RAW_HTTP_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)

        verify = os.getenv("RAW_HTTP_VERIFY_SSL")
        if verify:
            values["verify_ssl"] = verify.strip().lower() in _TRUTHY

        max_workers = os.getenv("RAW_HTTP_MAX_WORKERS")
        if max_workers:
            values["max_workers"] = int(max_workers)

        policy = os.getenv("RAW_HTTP_BATCH_POLICY")
        if policy:
            values["batch_policy"] = BatchPolicy(policy.strip().lower())

        user_agent = os.getenv("RAW_HTTP_USER_AGENT")
        if user_agent:
            values["user_agent"] = user_agent

        chunk_size = os.getenv("RAW_HTTP_CHUNK_SIZE")
        if chunk_size:
            values["chunk_size"] = int(chunk_size)

        debug = os.getenv("RAW_HTTP_DEBUG")
        if debug:
            values["debug"] = debug.strip().lower() in _TRUTHY

        values.update(overrides)
        return cls(**values)
