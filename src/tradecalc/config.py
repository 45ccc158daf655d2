"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CalculatorSettings(BaseSettings):
    """Position calculator parameters."""

    model_config = SettingsConfigDict(env_prefix="CALC_")

    tolerance: Decimal = Decimal("0.001")  # absolute slack for the 100% checks
    default_risk_amount: str = "10"  # pre-filled risk field on a fresh form
    currency_symbol: str = "$"


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "127.0.0.1"
    port: int = 8080
    title: str = "Trade Position Calculator"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    calculator: CalculatorSettings = CalculatorSettings()
    dashboard: DashboardSettings = DashboardSettings()
