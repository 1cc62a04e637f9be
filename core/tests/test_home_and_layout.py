from __future__ import annotations

from pathlib import Path

from license_console.home import ensure_console_layout, resolve_console_home


def test_resolve_console_home_from_env(tmp_path: Path) -> None:
    home = resolve_console_home({"LICENSE_CONSOLE_HOME": str(tmp_path)})
    assert home == tmp_path.resolve()


def test_resolve_console_home_relative_is_under_user_home() -> None:
    home = resolve_console_home({"LICENSE_CONSOLE_HOME": "console-data"})
    assert home == (Path.home() / "console-data").resolve()


def test_ensure_console_layout_creates_required_dirs(tmp_path: Path) -> None:
    paths = ensure_console_layout(tmp_path / "home")

    assert paths.home.exists()
    assert paths.config_dir.is_dir()
    assert paths.logs_dir.is_dir()
    assert paths.console_config_path == paths.config_dir / "console.json"
    assert paths.log_file == paths.logs_dir / "console.log"
