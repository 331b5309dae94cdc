"""
Run the API with uvicorn: ``python -m contactbook``.
"""

import uvicorn

from contactbook.config import get_settings
from contactbook.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging()

    logger.info(
        "Server running on port %s",
        settings.port,
        extra={"host": settings.host, "env": settings.app_env},
    )
    uvicorn.run(
        "contactbook.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
