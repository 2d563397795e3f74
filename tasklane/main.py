"""
TaskLane API entry point

Run with:
    python -m tasklane.main
or
    uvicorn tasklane.main:app
"""

import logging

import uvicorn

from tasklane.app_factory import create_app
from tasklane.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create app instance for uvicorn
app = create_app(settings)


def main() -> None:
    logger.info(f"Starting TaskLane API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "tasklane.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        reload=settings.debug and not settings.is_production,
    )


if __name__ == "__main__":
    main()
