from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConsolePaths:
    home: Path
    config_dir: Path
    logs_dir: Path

    @property
    def console_config_path(self) -> Path:
        return self.config_dir / "console.json"

    @property
    def log_file(self) -> Path:
        return self.logs_dir / "console.log"


def resolve_console_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("LICENSE_CONSOLE_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Relative values are anchored at the user's home, never the CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "LicenseConsole"
            return Path.home() / "AppData" / "Local" / "LicenseConsole"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "LicenseConsole"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "license-console"
        return Path.home() / ".local" / "share" / "license-console"

    return default_home().resolve()


def ensure_console_layout(home: Path) -> ConsolePaths:
    home.mkdir(parents=True, exist_ok=True)

    config_dir = home / "config"
    logs_dir = home / "logs"

    for path in (config_dir, logs_dir):
        path.mkdir(parents=True, exist_ok=True)

    return ConsolePaths(home=home, config_dir=config_dir, logs_dir=logs_dir)
