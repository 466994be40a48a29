from __future__ import annotations

from typing import Any

import uvicorn

from planbarometro.infrastructure.config import get_settings
from planbarometro.infrastructure.logging import get_logger

APP_PATH = "planbarometro.web.main:app"

logger = get_logger(__name__)


def build_uvicorn_options() -> dict[str, Any]:
    settings = get_settings()
    return {
        "host": settings.app.host,
        "port": settings.app.port,
        "reload": settings.is_development() and settings.app.debug,
        "log_level": settings.logging.level.lower(),
    }


def main() -> None:
    options = build_uvicorn_options()
    logger.info(f"Starting API server on {options['host']}:{options['port']}")
    uvicorn.run(APP_PATH, **options)


if __name__ == "__main__":
    main()
