"""
Tests for configuration loading and validation.
"""

import pytest
from unittest.mock import patch

from sentinel import config as settings
from sentinel.config import Config, get_config
from sentinel.services.urgency import engine_from_config


def test_environment_selection():
    assert isinstance(get_config("test"), settings.TestConfig)
    assert isinstance(get_config("production"), settings.ProductionConfig)
    assert isinstance(get_config("anything"), settings.DevelopmentConfig)


def test_test_config_uses_mock_llm():
    assert get_config("test").LLM_MOCK_MODE is True


def test_defaults():
    config = get_config("test")
    assert config.REMINDER_CUTOFF == "09:30"
    assert config.REMINDER_DAY_OFF == 6
    assert config.MAX_ALERT_HISTORY == 50


@pytest.mark.parametrize("key, value", [
    ("LLM_PROVIDER", "carrier-pigeon"),
    ("URGENCY_TIER_TABLE", "monthly"),
    ("REMINDER_CUTOFF", "9.30"),
    ("REMINDER_DAY_OFF", 7),
    ("MAX_ALERT_HISTORY", 0),
])
def test_validation_rejects_bad_values(key, value):
    with patch.object(Config, key, value):
        with pytest.raises(ValueError):
            Config.validate()


def test_engine_from_config():
    config = get_config("test")
    with patch.object(settings.TestConfig, "URGENCY_TIER_TABLE", "extended"), \
         patch.object(settings.TestConfig, "STUCK_PENDING_ESCALATION", False):
        table, policy = engine_from_config(config)
    assert table.name == "extended"
    assert policy.stuck_pending_enabled is False
    assert policy.overdue_after_days == 30
