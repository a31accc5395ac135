"""Invoicing API entry point

    python api.py            # development server
    uvicorn api:app          # behind a process manager
"""

import logging
import uvicorn
from config import ApplicationConfig
from src.api.app import create_app

logger = logging.getLogger("invoicing")

app = create_app(ApplicationConfig)


def main():
    logger.info(
        f"Starting invoicing API on {ApplicationConfig.API_HOST}:{ApplicationConfig.API_PORT} "
        f"(prefix {ApplicationConfig.API_PREFIX})"
    )
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=ApplicationConfig.API_RELOAD,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
