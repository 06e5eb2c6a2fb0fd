"""Configuration management for funding-engine."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from funding_engine.exceptions import ConfigurationError
from funding_engine.logging import parse_module_levels


@dataclass
class FundingThresholds:
    """Thresholds used when classifying funding sources."""

    expiring_soon_days: int = 30
    utilization_warning_pct: Decimal = Decimal("80")

    def __post_init__(self) -> None:
        if self.expiring_soon_days < 0:
            raise ConfigurationError("expiring_soon_days must be >= 0")
        if not Decimal("0") <= self.utilization_warning_pct <= Decimal("100"):
            raise ConfigurationError("utilization_warning_pct must be between 0 and 100")


@dataclass
class NotificationConfig:
    """Payment notification windows and sweep cadence."""

    sweep_interval_seconds: float = 60.0
    due_week_days: int = 7
    due_month_days: int = 30

    def __post_init__(self) -> None:
        if self.sweep_interval_seconds <= 0:
            raise ConfigurationError("sweep_interval_seconds must be positive")
        if not 0 <= self.due_week_days <= self.due_month_days:
            raise ConfigurationError("due_week_days must be between 0 and due_month_days")


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for funding-engine."""

    funding: FundingThresholds = field(default_factory=FundingThresholds)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_module_levels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import os

        try:
            funding = FundingThresholds(
                expiring_soon_days=int(os.getenv("EXPIRING_SOON_DAYS", "30")),
                utilization_warning_pct=Decimal(os.getenv("UTILIZATION_WARNING_PCT", "80")),
            )
            notifications = NotificationConfig(
                sweep_interval_seconds=float(os.getenv("SWEEP_INTERVAL_SECONDS", "60")),
            )
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except (ValueError, InvalidOperation) as exc:
            raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc

        log_module_levels = parse_module_levels(os.getenv("LOG_MODULE_LEVELS", ""))

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            funding=funding,
            notifications=notifications,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_module_levels=log_module_levels,
        )
