#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0 - Configuration
Centralised configuration with validation

Version: 1.0.0
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any, Mapping, List
from dataclasses import dataclass, field
from enum import Enum

import pytz


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class StorageConfig:
    """Local key-value storage"""
    data_dir: Path = Path("data")
    catalog_key: str = "catalog"
    statistics_key: str = "statistics"
    preferences_key: str = "preferences"
    keep_corrupted_blobs: bool = True


@dataclass
class AudioConfig:
    """Audio assets and levels"""
    assets_dir: Path = Path("assets/sounds")
    ambient_volume: float = 0.3


@dataclass
class NotificationConfig:
    """Daily reminder"""
    reminder_id: str = "mindful_daily_reminder"
    title: str = "Time for your daily mindfulness!"
    body: str = "Take a moment for yourself with Mindful Moments."
    timezone: str = "UTC"


@dataclass
class LoggingConfig:
    """Logging output"""
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_dir: Path = Path("logs")
    log_format: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    max_bytes: int = 10_485_760  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main configuration object, passed explicitly to the ServiceManager"""
    environment: Environment = Environment.DEVELOPMENT
    storage: StorageConfig = field(default_factory=StorageConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tick_interval: float = 1.0  # seconds

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Load configuration from MINDFUL_* environment variables"""
        env = os.environ if environ is None else environ

        config = cls(
            environment=Environment(env.get('MINDFUL_ENVIRONMENT', 'development')),
            storage=StorageConfig(
                data_dir=Path(env.get('MINDFUL_DATA_DIR', 'data')),
            ),
            audio=AudioConfig(
                assets_dir=Path(env.get('MINDFUL_ASSETS_DIR', 'assets/sounds')),
                ambient_volume=float(env.get('MINDFUL_AMBIENT_VOLUME', 0.3)),
            ),
            notifications=NotificationConfig(
                timezone=env.get('MINDFUL_TIMEZONE', 'UTC'),
            ),
            logging=LoggingConfig(
                level=LogLevel(env.get('MINDFUL_LOG_LEVEL', 'INFO').upper()),
                log_to_file=env.get('MINDFUL_LOG_TO_FILE', 'false').lower() == 'true',
                log_dir=Path(env.get('MINDFUL_LOG_DIR', 'logs')),
            ),
            tick_interval=float(env.get('MINDFUL_TICK_INTERVAL', 1.0)),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration, collecting every error"""
        errors: List[str] = []

        try:
            pytz.timezone(self.notifications.timezone)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Unknown time zone: {self.notifications.timezone}")

        if not 0.0 <= self.audio.ambient_volume <= 1.0:
            errors.append(f"Ambient volume {self.audio.ambient_volume} is outside 0.0-1.0")

        if self.tick_interval <= 0:
            errors.append("Tick interval must be positive")

        keys = [self.storage.catalog_key, self.storage.statistics_key, self.storage.preferences_key]
        if len(set(keys)) != len(keys):
            errors.append("Storage keys must be distinct")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    @property
    def timezone(self):
        return pytz.timezone(self.notifications.timezone)

    def ensure_directories(self) -> None:
        """Create the directories the app writes to"""
        directories = [self.storage.data_dir]
        if self.logging.log_to_file:
            directories.append(self.logging.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """dictConfig-compatible logging configuration"""
        handlers = ['console']
        if self.logging.log_to_file:
            handlers.append('file')

        handler_configs: Dict[str, Any] = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': self.logging.level.value,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.logging.log_to_file:
            handler_configs['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.logging.level.value,
                'formatter': 'default',
                'filename': str(self.logging.log_dir / f"mindful_{self.environment.value}.log"),
                'maxBytes': self.logging.max_bytes,
                'backupCount': self.logging.backup_count,
                'encoding': 'utf-8'
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.logging.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': handler_configs,
            'loggers': {
                '': {
                    'level': self.logging.level.value,
                    'handlers': handlers,
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialise configuration for diagnostics"""
        return {
            'environment': self.environment.value,
            'data_dir': str(self.storage.data_dir),
            'assets_dir': str(self.audio.assets_dir),
            'timezone': self.notifications.timezone,
            'log_level': self.logging.level.value,
            'log_to_file': self.logging.log_to_file,
            'tick_interval': self.tick_interval
        }


__all__ = [
    'AppConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'AudioConfig',
    'NotificationConfig',
    'LoggingConfig'
]
