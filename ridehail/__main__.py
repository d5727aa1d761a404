"""
RideHail - Server Entrypoint

Usage:
    python -m ridehail
"""

import uvicorn

from ridehail.config import get_settings
from ridehail.log import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "ridehail.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
