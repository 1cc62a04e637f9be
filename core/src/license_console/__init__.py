from license_console.config import (
    ConsoleConfig,
    apply_env_overrides,
    ensure_console_config,
    load_console_config,
)
from license_console.home import ConsolePaths, ensure_console_layout, resolve_console_home

__version__ = "0.1.0"

__all__ = [
    "ConsoleConfig",
    "ConsolePaths",
    "__version__",
    "apply_env_overrides",
    "ensure_console_config",
    "ensure_console_layout",
    "load_console_config",
    "resolve_console_home",
]
