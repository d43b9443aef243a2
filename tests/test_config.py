import logging
from pathlib import Path

import pytest

from mindful.config import AppConfig, Environment, LoggingConfig, LogLevel
from mindful.utils.datetime_utils import format_duration, parse_time_of_day
from mindful.utils.logger import configure_logging, setup_logger


class TestAppConfig:
    def test_defaults_are_valid(self):
        config = AppConfig()
        config.validate()

        assert config.environment == Environment.DEVELOPMENT
        assert config.timezone.zone == "UTC"

    def test_from_env(self, tmp_path):
        config = AppConfig.from_env({
            "MINDFUL_ENVIRONMENT": "testing",
            "MINDFUL_DATA_DIR": str(tmp_path / "store"),
            "MINDFUL_TIMEZONE": "Europe/Berlin",
            "MINDFUL_LOG_LEVEL": "debug",
        })

        assert config.environment == Environment.TESTING
        assert config.storage.data_dir == Path(tmp_path / "store")
        assert config.logging.level == LogLevel.DEBUG
        assert config.timezone.zone == "Europe/Berlin"

    def test_validate_collects_errors(self):
        config = AppConfig(tick_interval=0)
        config.notifications.timezone = "Mars/Olympus"

        with pytest.raises(ValueError) as excinfo:
            config.validate()

        message = str(excinfo.value)
        assert "Mars/Olympus" in message
        assert "Tick interval" in message

    def test_logging_config_adds_file_handler(self, tmp_path):
        config = AppConfig()
        config.logging.log_to_file = True
        config.logging.log_dir = tmp_path / "logs"

        logging_config = config.get_logging_config()

        assert set(logging_config["handlers"]) == {"console", "file"}
        configure_logging(config)
        assert (tmp_path / "logs").is_dir()

        for logger in (logging.getLogger(), logging.getLogger("apscheduler")):
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        logging.getLogger("apscheduler").propagate = True


def test_setup_logger_adds_one_file_handler(tmp_path):
    config = LoggingConfig(log_dir=tmp_path / "logs")

    logger = setup_logger(config, name="mindful.test_setup")
    setup_logger(config, name="mindful.test_setup")
    logger.info("hello")

    try:
        assert len(logger.handlers) == 1
        assert (tmp_path / "logs" / "mindful.log").exists()
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


@pytest.mark.parametrize("value, expected", [("08:00", (8, 0)), ("23:59", (23, 59)), ("0:05", (0, 5))])
def test_parse_time_of_day(value, expected):
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize("value", ["24:00", "8", "ab:cd"])
def test_parse_time_of_day_rejects(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_format_duration():
    assert format_duration(185) == "03:05"
    assert format_duration(-3) == "00:00"
