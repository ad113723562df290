"""
Unit tests for configuration.
"""

import logging

import pytest
from pydantic import ValidationError

from src.core.config import Config, HomogeneityThresholds
from src.core.logging_config import setup_logging


def test_defaults(mock_config):
    assert mock_config.log_level == "WARNING"
    assert mock_config.anomaly.default_profile == "conservative"
    assert mock_config.anomaly.filtering_strictness == "criticalAndHigh"
    assert mock_config.growth.min_valid_points == 3
    assert mock_config.homogeneity.excellent == 15
    assert mock_config.homogeneity.good == 25
    assert mock_config.homogeneity.poor == 30
    assert mock_config.workers.max_workers == 1


def test_logs_dir_created(mock_config):
    assert mock_config.logs_dir.is_dir()


def test_nested_environment_override(monkeypatch, tmp_path):
    monkeypatch.setenv("TUMORQC_LOGS_DIR", str(tmp_path / "env-logs"))
    monkeypatch.setenv("TUMORQC_GROWTH__BATCH_SIZE", "7")
    monkeypatch.setenv("TUMORQC_HOMOGENEITY__EXCELLENT", "10")

    settings = Config()
    assert settings.growth.batch_size == 7
    assert settings.homogeneity.excellent == 10
    assert settings.homogeneity.good == 25


def test_homogeneity_thresholds_must_be_ordered():
    with pytest.raises(ValidationError):
        HomogeneityThresholds(excellent=30, good=25, poor=20)


def test_setup_logging_is_idempotent():
    logger = setup_logging("src.tests.logging_probe", level="debug", log_to_file=False)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert setup_logging("src.tests.logging_probe") is logger
    assert len(logger.handlers) == 1
