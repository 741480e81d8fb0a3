"""
Logging setup.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
import os

from kalikascan_admin.infrastructure.config import settings


def setup_logging(log_dir: str = None, level: str = None):
    """Configure the root logger for the application."""
    log_dir = log_dir or settings.LOG_DIR
    level = (level or settings.LOG_LEVEL).upper()

    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    # Avoid duplicated handlers when uvicorn reloads the module
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "kalikascan_admin.log"),
        maxBytes=10485760,  # 10MB
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Quieten chatty libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("cachecontrol").setLevel(logging.WARNING)

    logger.info("Logging system initialized")
