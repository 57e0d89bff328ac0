import logging

import pytest
from pydantic import ValidationError

from config import AppConfig, configure_logging


def test_defaults_when_environment_is_empty():
    config = AppConfig.from_env({})
    assert config.gemini_api_key is None
    assert config.model == "gemini-2.5-flash"
    assert config.temperature == 0.7
    assert config.notification_limit == 50


def test_values_read_from_environment():
    config = AppConfig.from_env({
        "GOOGLE_API_KEY": "google-key",
        "STUDY_PLANNER_MODEL": "gemini-2.0-flash",
        "STUDY_PLANNER_TEMPERATURE": "0.2",
        "STUDY_PLANNER_LOG_LEVEL": "debug",
        "STUDY_PLANNER_NOTIFICATION_LIMIT": "",
    })
    assert config.gemini_api_key == "google-key"
    assert config.model == "gemini-2.0-flash"
    assert config.temperature == 0.2
    assert config.log_level == "debug"
    assert config.notification_limit == 50


def test_gemini_key_wins_over_google_key():
    config = AppConfig.from_env({"GEMINI_API_KEY": "gemini", "GOOGLE_API_KEY": "google"})
    assert config.gemini_api_key == "gemini"


def test_invalid_values_raise():
    with pytest.raises(ValidationError):
        AppConfig.from_env({"STUDY_PLANNER_TEMPERATURE": "hot"})
    with pytest.raises(ValidationError):
        AppConfig.from_env({"STUDY_PLANNER_NOTIFICATION_LIMIT": "0"})


def test_configure_logging_sets_level():
    configure_logging("warning")
    assert logging.getLogger().level == logging.WARNING
