import logging

import uvicorn

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

# Validate critical configuration before the app and engine are built
from utils.config_validator import validate_or_exit
validate_or_exit(config)

from app import app


def main() -> None:
    logging.info(f"[run.py] Starting storefront pricing API on {config.WEBAPP_HOST}:{config.WEBAPP_PORT}")
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT, log_config=None)


if __name__ == '__main__':
    main()
