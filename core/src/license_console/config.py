from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from license_console.home import ConsolePaths


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8686, ge=1, le=65535)


class BackendConfig(BaseModel):
    """Where the licensing REST backend lives and how to talk to it."""

    base_url: str = Field(
        default="http://127.0.0.1:8000/api",
        min_length=1,
        description="Base URL of the REST backend; endpoint paths are appended to it.",
    )
    timeout_seconds: float = Field(default=15.0, gt=0)
    extra_headers: dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Headers sent with every backend request, e.g. "
            "{'ngrok-skip-browser-warning': 'true'} when the backend sits behind ngrok."
        ),
    )
    verify_tls: bool = Field(default=True)


class SessionConfig(BaseModel):
    cookie_max_age_seconds: int = Field(default=60 * 60 * 24 * 30, ge=60)
    secure_cookie: bool = Field(
        default=False, description="Set the Secure flag; enable when served over HTTPS."
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class UiConfig(BaseModel):
    dashboard_history_limit: int = Field(default=5, ge=1, le=100)
    dashboard_search_limit: int = Field(default=5, ge=1, le=100)


class ConsoleConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    ui: UiConfig = Field(default_factory=UiConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_console_config(paths: ConsolePaths) -> ConsoleConfig:
    """Load config from ${LICENSE_CONSOLE_HOME}/config/console.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.console_config_path
    if not config_path.exists():
        return ConsoleConfig()

    raw = _read_json(config_path)
    return ConsoleConfig.model_validate(raw)


def write_console_config(paths: ConsolePaths, config: ConsoleConfig) -> None:
    """Persist config to ${LICENSE_CONSOLE_HOME}/config/console.json."""

    payload = config.model_dump(mode="json", exclude_none=True)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.console_config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def ensure_console_config(paths: ConsolePaths) -> ConsoleConfig:
    """Load the config, seeding console.json with the defaults on first start."""

    if paths.console_config_path.exists():
        return load_console_config(paths)

    config = ConsoleConfig()
    write_console_config(paths, config)
    return config


def apply_env_overrides(
    config: ConsoleConfig, environ: dict[str, str] | None = None
) -> ConsoleConfig:
    """Apply LICENSE_CONSOLE_* environment overrides on top of the file config."""

    env = os.environ if environ is None else environ

    backend_url = (env.get("LICENSE_CONSOLE_BACKEND_URL") or "").strip()
    bind = (env.get("LICENSE_CONSOLE_BIND") or "").strip()
    port = (env.get("LICENSE_CONSOLE_PORT") or "").strip()

    updated = config
    if backend_url:
        backend = updated.backend.model_copy(update={"base_url": backend_url})
        updated = updated.model_copy(update={"backend": backend})

    network_update: dict[str, Any] = {}
    if bind:
        network_update["bind_host"] = bind
    if port:
        network_update["port"] = int(port)
    if network_update:
        # Round-trip through validation so a bad port is rejected like a bad file.
        network = NetworkConfig.model_validate(
            {**updated.network.model_dump(), **network_update}
        )
        updated = updated.model_copy(update={"network": network})

    return updated
