"""
Logging setup for cohort analyses.

Every analysis module logs through ``logging.getLogger(__name__)``; attaching
handlers to the ``src`` package logger therefore captures scans, fits and
homogeneity reports in one place. The rotating file lives in config.logs_dir.
"""

import logging
import logging.handlers
from typing import Optional

from .config import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILENAME = "tumor_qc.log"


def setup_logging(
    logger_name: str = "src",
    level: Optional[str] = None,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to a logger.

    Args:
        logger_name: Logger to configure (the package root by default)
        level: Log level name; config.log_level when None
        log_to_file: Also write to config.logs_dir / LOG_FILENAME

    Returns:
        The configured logger. Calling again is a no-op once handlers exist.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    level = (level or config.log_level).upper()
    logger.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers = [logging.StreamHandler()]
    if log_to_file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.logs_dir / LOG_FILENAME,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
