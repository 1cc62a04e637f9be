from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import uvicorn

from license_console.app import create_app
from license_console.config import apply_env_overrides, ensure_console_config
from license_console.home import ensure_console_layout, resolve_console_home


def main() -> None:
    home = resolve_console_home()
    paths = ensure_console_layout(home)
    config = apply_env_overrides(ensure_console_config(paths))

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(
                paths.log_file,
                maxBytes=config.logging.max_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
                encoding="utf-8",
            ),
            logging.StreamHandler(),
        ],
    )

    uvicorn.run(create_app(), host=config.network.bind_host, port=config.network.port)


if __name__ == "__main__":
    main()
