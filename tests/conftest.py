"""Shared test fixtures for the trade position calculator."""

import pytest

from tradecalc.config import AppSettings, CalculatorSettings, DashboardSettings
from tradecalc.position.calculator import PositionCalculator


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults."""
    return AppSettings(
        log_level="DEBUG",
        calculator=CalculatorSettings(),
        dashboard=DashboardSettings(title="Test Calculator"),
    )


@pytest.fixture
def calculator(mock_settings: AppSettings) -> PositionCalculator:
    """PositionCalculator with the default 0.001 tolerance."""
    return PositionCalculator.from_settings(mock_settings.calculator)
