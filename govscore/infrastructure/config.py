"""
Centralized configuration management for the governance scoring core.

Provides environment-specific configuration with validation and type safety
using Pydantic settings. Scoring engines never read these settings directly:
callers turn them into the immutable assumption structs the engines accept.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from ..domain.financial import FinancialAssumptions, IrrSolverConfig
from .exceptions import ConfigurationError
from .logging import setup_logging

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class LoggingConfig(BaseSettings):
    """
    Logging configuration settings.

    Example:
        >>> log_config = LoggingConfig(level="DEBUG", file_path="./logs/govscore.log")
        >>> print(log_config.get_file_handler_config())
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field(None, description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = {"env_prefix": "LOG_", "case_sensitive": False}

    def get_file_handler_config(self) -> dict[str, Any] | None:
        """Get file handler configuration if file logging is enabled."""
        if not self.file_path:
            return None

        return {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": self.file_path,
            "maxBytes": self.max_bytes,
            "backupCount": self.backup_count,
            "encoding": "utf-8",
        }

    def apply(self) -> None:
        """Install these settings as the active logging configuration."""
        setup_logging(
            level=self.level,
            log_file=self.file_path,
            structured=self.structured,
            enable_console=self.console_enabled,
            max_bytes=self.max_bytes,
            backup_count=self.backup_count,
        )


class ContentConfig(BaseSettings):
    """
    Locations of the declarative assessment content.

    The question bank and the canned recommendation templates are data, not
    code, so alternate content sets can be swapped in through ``CONTENT_*``
    environment variables.
    """

    question_bank_path: Path = Field(
        DATA_DIR / "questions.json", description="Question bank JSON file"
    )
    recommendations_path: Path = Field(
        DATA_DIR / "recommendations.json", description="Recommendation templates JSON file"
    )

    model_config = {"env_prefix": "CONTENT_", "case_sensitive": False}

    @field_validator("question_bank_path", "recommendations_path")
    def validate_content_path(cls, v: Path) -> Path:
        """Content files must exist and be JSON."""
        if v.suffix.lower() != ".json":
            raise ValueError(f"Content file must be a .json file: {v}")
        if not v.is_file():
            raise ValueError(f"Content file not found: {v}")
        return v


class FinanceConfig(BaseSettings):
    """
    Financial model assumptions.

    Example:
        >>> finance = FinanceConfig(discount_rate=0.08)
        >>> assumptions = finance.assumptions()
        >>> print(assumptions.discount_rate)
    """

    discount_rate: float = Field(0.10, ge=0, le=1, description="Annual NPV discount rate")
    npv_years: int = Field(3, ge=1, le=30, description="NPV horizon in years")
    payback_sentinel: int = Field(999, ge=1, description="Payback value meaning 'never'")
    currency_symbol: str = Field("$", min_length=1, max_length=3)

    irr_initial_guess: float = Field(0.10, description="Newton-Raphson starting rate")
    irr_max_iterations: int = Field(100, ge=1, le=10_000)
    irr_tolerance: float = Field(1e-4, gt=0)
    irr_derivative_floor: float = Field(1e-10, gt=0)
    irr_min_rate: float = Field(-0.99, gt=-1)
    irr_max_rate: float = Field(10.0, gt=0)
    irr_bisection_fallback: bool = Field(True)

    model_config = {"env_prefix": "FINANCE_", "case_sensitive": False}

    @model_validator(mode="after")
    def validate_irr_bounds(self):
        """The IRR clamp range must be non-empty and contain the initial guess."""
        if self.irr_min_rate >= self.irr_max_rate:
            raise ValueError("irr_min_rate must be lower than irr_max_rate")
        if not (self.irr_min_rate <= self.irr_initial_guess <= self.irr_max_rate):
            raise ValueError("irr_initial_guess must lie within the IRR clamp range")
        return self

    def assumptions(self) -> FinancialAssumptions:
        """Build the immutable assumption struct consumed by the financial model."""
        return FinancialAssumptions(
            discount_rate=self.discount_rate,
            npv_years=self.npv_years,
            payback_sentinel=self.payback_sentinel,
            currency_symbol=self.currency_symbol,
            irr=IrrSolverConfig(
                initial_guess=self.irr_initial_guess,
                max_iterations=self.irr_max_iterations,
                tolerance=self.irr_tolerance,
                derivative_floor=self.irr_derivative_floor,
                min_rate=self.irr_min_rate,
                max_rate=self.irr_max_rate,
                bisection_fallback=self.irr_bisection_fallback,
            ),
        )


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> config = get_settings()
        >>> print(config.app.environment)
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    version: str = Field("0.1.0", description="Application version")

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    @model_validator(mode="after")
    def debug_implies_development(self):
        """Ensure debug mode is only enabled outside production."""
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


class Settings:
    """
    Complete settings container.

    Provides structured access to all configuration sections with lazy
    loading and caching.

    Example:
        >>> settings = get_settings()
        >>> print(settings.finance.discount_rate)
        >>> print(settings.content.question_bank_path)
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._logging: LoggingConfig | None = None
        self._content: ContentConfig | None = None
        self._finance: FinanceConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        """Get application configuration."""
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration; an explicit LOG_LEVEL wins over the environment default."""
        if self._logging is None:
            if any(key.upper() == "LOG_LEVEL" for key in os.environ):
                self._logging = LoggingConfig()
            else:
                level = "DEBUG" if self.app.debug else "INFO"
                if self.app.environment == "production":
                    level = "WARNING"
                self._logging = LoggingConfig(level=level)
        return self._logging

    @property
    def content(self) -> ContentConfig:
        """Get content file configuration."""
        if self._content is None:
            self._content = ContentConfig()
        return self._content

    @property
    def finance(self) -> FinanceConfig:
        """Get financial model configuration."""
        if self._finance is None:
            self._finance = FinanceConfig()
        return self._finance

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_production(self) -> bool:
        return self.app.environment == "production"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"

    def get_environment_info(self) -> dict[str, Any]:
        """Get summary of current environment configuration."""
        return {
            "environment": self.app.environment,
            "version": self.app.version,
            "debug": self.app.debug,
            "logging_level": self.logging.level,
            "content": {
                "question_bank": str(self.content.question_bank_path),
                "recommendations": str(self.content.recommendations_path),
            },
            "finance": {
                "discount_rate": self.finance.discount_rate,
                "npv_years": self.finance.npv_years,
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get settings instance (cached).

    Returns:
        Settings instance with all configuration loaded
    """
    return Settings()


def _section_prefixes() -> dict[str, str]:
    sections = {
        "app": ApplicationConfig,
        "logging": LoggingConfig,
        "content": ContentConfig,
        "finance": FinanceConfig,
    }
    return {name: cls.model_config["env_prefix"] for name, cls in sections.items()}


def load_settings_from_file(file_path: str) -> Settings:
    """
    Load settings from a JSON configuration file.

    Each top-level section is written to the environment under that section's
    own prefix, so ``{"finance": {"discount_rate": 0.08}}`` sets
    ``FINANCE_DISCOUNT_RATE`` and ``{"logging": {"level": "DEBUG"}}`` sets
    ``LOG_LEVEL``.

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        ConfigurationError: If the file format is unsupported, the JSON is
            malformed, or a section is unknown

    Example:
        >>> settings = load_settings_from_file("config/production.json")
        >>> print(settings.app.environment)
    """
    config_path = Path(file_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    if config_path.suffix.lower() != ".json":
        raise ConfigurationError(
            f"Unsupported configuration file format: {config_path.suffix}",
            details={"file_path": str(config_path)},
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in configuration file {config_path.name}: {e}",
            details={"file_path": str(config_path)},
        ) from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(
            "Configuration file must contain a JSON object of sections",
            details={"file_path": str(config_path)},
        )

    prefixes = _section_prefixes()
    for section, values in config_data.items():
        if section not in prefixes:
            raise ConfigurationError(
                f"Unknown configuration section: {section}", config_key=section
            )
        if isinstance(values, dict):
            for key, value in values.items():
                os.environ[f"{prefixes[section]}{key.upper()}"] = str(value)

    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> Settings:
    """
    Override specific settings for testing or development.

    Keys are environment variable names without case, e.g.
    ``override_settings(app_environment="testing", finance_discount_rate=0.08)``.
    """
    for key, value in kwargs.items():
        os.environ[key.upper()] = str(value)

    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Reset settings cache to reload from environment."""
    get_settings.cache_clear()
