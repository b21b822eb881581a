"""Tests for service configuration and the circulation policy table."""

import os
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from library_circulation.config import CirculationConfig, get_config, reset_config
from library_circulation.models import MembershipType


class TestCirculationConfig:
    def test_default_configuration(self):
        config = CirculationConfig()

        assert config.server_name == "library-circulation"
        assert config.server_version == "0.1.0"
        assert config.database_path == Path("data/circulation.db")
        assert config.database_url is None
        assert config.fine_per_day == Decimal("0.50")
        assert config.min_extension_days == 1
        assert config.max_extension_days == 30
        assert config.prevent_duplicate_loans is False
        assert config.overdue_sweep_interval_seconds == 3600

    def test_loan_periods(self):
        assert CirculationConfig().loan_periods == {
            MembershipType.REGULAR: 14,
            MembershipType.STUDENT: 21,
            MembershipType.PREMIUM: 30,
        }

    def test_environment_variable_loading(self):
        env_vars = {
            "LIBRARY_CIRCULATION_SERVER_NAME": "test-circulation",
            "LIBRARY_CIRCULATION_LOAN_PERIOD_STUDENT_DAYS": "28",
            "LIBRARY_CIRCULATION_FINE_PER_DAY": "1.25",
            "LIBRARY_CIRCULATION_PREVENT_DUPLICATE_LOANS": "true",
            "LIBRARY_CIRCULATION_LOG_LEVEL": "debug",
        }

        with patch.dict(os.environ, env_vars):
            config = CirculationConfig()

        assert config.server_name == "test-circulation"
        assert config.loan_periods[MembershipType.STUDENT] == 28
        assert config.fine_per_day == Decimal("1.25")
        assert config.prevent_duplicate_loans is True
        assert config.log_level == "DEBUG"
        assert config.is_development

    def test_invalid_server_name(self):
        with pytest.raises(ValidationError):
            CirculationConfig(server_name="Not Valid!")

    def test_negative_fine_rejected(self):
        with pytest.raises(ValidationError):
            CirculationConfig(fine_per_day=Decimal("-1"))

    def test_fine_with_sub_cent_precision_rejected(self):
        with pytest.raises(ValidationError):
            CirculationConfig(fine_per_day=Decimal("0.125"))

    def test_zero_loan_period_rejected(self):
        with pytest.raises(ValidationError):
            CirculationConfig(loan_period_regular_days=0)

    def test_extension_bounds_must_form_a_range(self):
        with pytest.raises(ValidationError, match="min_extension_days cannot exceed"):
            CirculationConfig(min_extension_days=10, max_extension_days=5)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            CirculationConfig(log_level="VERBOSE")

    def test_database_url(self, tmp_path):
        config = CirculationConfig(database_path=tmp_path / "lib.db")
        assert config.get_database_url() == f"sqlite:///{(tmp_path / 'lib.db').absolute()}"

        override = CirculationConfig(database_url="postgresql://localhost/library")
        assert override.get_database_url() == "postgresql://localhost/library"


class TestConfigSingleton:
    def test_get_config_is_cached(self):
        reset_config()
        assert get_config() is get_config()

    def test_reset_config(self):
        first = get_config()
        reset_config()
        with patch.dict(os.environ, {"LIBRARY_CIRCULATION_DEBUG": "true"}):
            second = get_config()
        assert first is not second
        assert second.debug is True
