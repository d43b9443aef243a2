import logging
import os
import logging.config
from logging.handlers import RotatingFileHandler
from typing import Optional

from mindful.config import AppConfig, LoggingConfig


def setup_logger(config: LoggingConfig, file_name: str = "mindful.log", name: str = "mindful") -> logging.Logger:
    """Rotating file log for one logger tree, without touching the root logger"""
    config.log_dir.mkdir(exist_ok=True, parents=True)
    log_path = config.log_dir / file_name

    logger = logging.getLogger(name)
    logger.setLevel(config.level.value)
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == os.path.abspath(log_path):
            return logger

    handler = RotatingFileHandler(log_path, maxBytes=config.max_bytes, backupCount=config.backup_count,
                                  encoding="utf-8")
    handler.setFormatter(logging.Formatter(config.log_format))
    logger.addHandler(handler)
    return logger


def configure_logging(config: Optional[AppConfig] = None) -> None:
    """Apply the dictConfig built from the app configuration"""
    config = config or AppConfig()
    if config.logging.log_to_file:
        config.logging.log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(config.get_logging_config())
