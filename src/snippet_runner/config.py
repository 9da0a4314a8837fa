"""Runner configuration loading.

Configuration lives in ``.snippet-runner/config.yaml`` under the current
directory, or in a file passed explicitly. Every field has a default, so
a missing project file simply yields the defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from snippet_runner.schemas.snippet import ExecutionWorld

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".snippet-runner"
CONFIG_FILE_NAME = "config.yaml"
RUNNER_URL_ENV = "SNIPPET_RUNNER_URL"


class ConnectionPoolConfig(BaseModel):
    """httpx connection pool limits."""

    model_config = ConfigDict(extra="forbid")

    max_connections: int = 10
    max_keepalive: int = 5
    keepalive_expiry: float = 30.0


class HttpTimeoutConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    connect: float = 10.0
    read: float = 30.0
    write: float = 10.0
    pool: float = 5.0


class RunnerConfig(BaseModel):
    """Settings for fetching and running the external snippet runner."""

    model_config = ConfigDict(extra="forbid")

    runner_url: str | None = None
    interpreter: list[str] = Field(default_factory=lambda: ["node"])
    runner_timeout_seconds: int = Field(default=30, gt=0)
    world: ExecutionWorld = ExecutionWorld.ISOLATED
    connection_pool: ConnectionPoolConfig = Field(default_factory=ConnectionPoolConfig)
    http_timeout: HttpTimeoutConfig = Field(default_factory=HttpTimeoutConfig)


def default_config_path() -> Path:
    return Path.cwd() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(path: Path | None = None) -> RunnerConfig:
    """Load runner configuration.

    Args:
        path: Explicit config file. When None, the project config file is
            used if present, otherwise defaults.

    Returns:
        Validated configuration, with SNIPPET_RUNNER_URL applied on top

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file does not contain a mapping
        pydantic.ValidationError: If a field is invalid
    """
    data: dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = _read_yaml(path)
    else:
        candidate = default_config_path()
        if candidate.exists():
            data = _read_yaml(candidate)

    env_url = os.environ.get(RUNNER_URL_ENV)
    if env_url:
        data["runner_url"] = env_url

    return RunnerConfig.model_validate(data)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    logger.debug("Loaded config from %s", path)
    return data


def build_http_client(config: RunnerConfig) -> Any:
    """Create an httpx.AsyncClient using the configured pool and timeouts."""
    import httpx

    pool = config.connection_pool
    limits = httpx.Limits(
        max_connections=pool.max_connections,
        max_keepalive_connections=pool.max_keepalive,
        keepalive_expiry=pool.keepalive_expiry,
    )
    timeout = httpx.Timeout(
        connect=config.http_timeout.connect,
        read=config.http_timeout.read,
        write=config.http_timeout.write,
        pool=config.http_timeout.pool,
    )
    return httpx.AsyncClient(
        limits=limits,
        timeout=timeout,
        headers={"User-Agent": "snippet-runner/1.0"},
    )
