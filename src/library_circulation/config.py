"""Configuration management for the Library Circulation service.

Settings are loaded from the environment (``LIBRARY_CIRCULATION_`` prefix) or
a ``.env`` file and validated with Pydantic v2. The circulation policy table
(loan periods, fine rate, extension bounds) lives here so deployments can
override it without code changes.
"""

from decimal import Decimal
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.user import MembershipType


class CirculationConfig(BaseSettings):
    """Service configuration and circulation policy."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_CIRCULATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="library-circulation",
        description="MCP server name used in protocol handshake",
        pattern=r"^[a-z0-9-]+$",
        min_length=3,
        max_length=50,
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version for capability negotiation",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/circulation.db"),
        description="SQLite database file path",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides database_path when set",
    )

    # === Circulation Policy ===

    loan_period_regular_days: int = Field(
        default=14,
        description="Loan period for REGULAR members",
        ge=1,
        le=365,
    )

    loan_period_student_days: int = Field(
        default=21,
        description="Loan period for STUDENT members",
        ge=1,
        le=365,
    )

    loan_period_premium_days: int = Field(
        default=30,
        description="Loan period for PREMIUM members",
        ge=1,
        le=365,
    )

    fine_per_day: Decimal = Field(
        default=Decimal("0.50"),
        description="Fine charged per day late",
        ge=0,
        decimal_places=2,
    )

    min_extension_days: int = Field(
        default=1,
        description="Smallest allowed due-date extension",
        ge=1,
    )

    max_extension_days: int = Field(
        default=30,
        description="Largest allowed due-date extension",
        ge=1,
    )

    prevent_duplicate_loans: bool = Field(
        default=False,
        description="Reject a borrow when the user already holds an open record for the book",
    )

    overdue_sweep_interval_seconds: int = Field(
        default=3600,
        description="Seconds between background overdue sweeps (0 disables the sweeper)",
        ge=0,
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_extension_bounds(self) -> "CirculationConfig":
        """Ensure the extension range is not empty."""
        if self.min_extension_days > self.max_extension_days:
            raise ValueError("min_extension_days cannot exceed max_extension_days")
        return self

    # === Computed Properties ===

    @property
    def loan_periods(self) -> dict[MembershipType, int]:
        """Loan period in days for each membership type."""
        return {
            MembershipType.REGULAR: self.loan_period_regular_days,
            MembershipType.STUDENT: self.loan_period_student_days,
            MembershipType.PREMIUM: self.loan_period_premium_days,
        }

    @property
    def is_development(self) -> bool:
        return self.debug or self.log_level == "DEBUG"

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.database_path.absolute()}"


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: CirculationConfig | None = None


def get_config() -> CirculationConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = CirculationConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
