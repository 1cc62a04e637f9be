from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from license_console.config import (
    ConsoleConfig,
    apply_env_overrides,
    ensure_console_config,
    load_console_config,
    write_console_config,
)
from license_console.home import ensure_console_layout


def test_load_console_config_defaults_when_missing(tmp_path: Path) -> None:
    paths = ensure_console_layout(tmp_path)
    cfg = load_console_config(paths)
    assert isinstance(cfg, ConsoleConfig)
    assert cfg.network.bind_host == "127.0.0.1"
    assert cfg.network.port == 8686
    assert cfg.backend.base_url == "http://127.0.0.1:8000/api"
    assert cfg.ui.dashboard_history_limit == 5


def test_load_console_config_validation_error(tmp_path: Path) -> None:
    paths = ensure_console_layout(tmp_path)

    paths.console_config_path.write_text(
        json.dumps({"network": {"port": "not-an-int"}}),
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_console_config(paths)


def test_written_config_is_loaded_back(tmp_path: Path) -> None:
    paths = ensure_console_layout(tmp_path)
    cfg = ConsoleConfig.model_validate(
        {
            "backend": {
                "base_url": "https://licensing.example.com/api",
                "extra_headers": {"ngrok-skip-browser-warning": "true"},
            }
        }
    )

    write_console_config(paths, cfg)
    loaded = load_console_config(paths)

    assert loaded.backend.base_url == "https://licensing.example.com/api"
    assert loaded.backend.extra_headers == {"ngrok-skip-browser-warning": "true"}


def test_ensure_console_config_seeds_defaults_once(tmp_path: Path) -> None:
    paths = ensure_console_layout(tmp_path)
    assert not paths.console_config_path.exists()

    cfg = ensure_console_config(paths)

    assert cfg.network.port == 8686
    seeded = json.loads(paths.console_config_path.read_text(encoding="utf-8"))
    assert seeded["backend"]["base_url"] == "http://127.0.0.1:8000/api"

    seeded["network"]["port"] = 9000
    paths.console_config_path.write_text(json.dumps(seeded), encoding="utf-8")
    assert ensure_console_config(paths).network.port == 9000


def test_env_overrides_backend_and_network() -> None:
    cfg = apply_env_overrides(
        ConsoleConfig(),
        {
            "LICENSE_CONSOLE_BACKEND_URL": "http://10.0.0.5:9000/api",
            "LICENSE_CONSOLE_BIND": "0.0.0.0",
            "LICENSE_CONSOLE_PORT": "9090",
        },
    )

    assert cfg.backend.base_url == "http://10.0.0.5:9000/api"
    assert cfg.network.bind_host == "0.0.0.0"
    assert cfg.network.port == 9090


def test_env_override_rejects_bad_port() -> None:
    with pytest.raises((ValidationError, ValueError)):
        apply_env_overrides(ConsoleConfig(), {"LICENSE_CONSOLE_PORT": "70000"})
