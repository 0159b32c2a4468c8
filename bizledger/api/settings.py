"""
Settings Module

Reads runtime configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _database_url() -> str:
    return os.getenv(
        "DATABASE_URL",
        f"postgresql://{os.getenv('POSTGRES_USER', 'accounting')}:"
        f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
        f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
        f"{os.getenv('POSTGRES_PORT', '5432')}/"
        f"{os.getenv('POSTGRES_DB', 'accounting_db')}"
    )


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Application settings."""

    database_url: str = field(default_factory=_database_url)
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    jwt_secret: str = field(default_factory=lambda: os.getenv("JWT_SECRET", "dev-secret"))
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = field(
        default_factory=lambda: int(os.getenv("JWT_EXPIRES_MINUTES", "60"))
    )
    refresh_expires_days: int = field(
        default_factory=lambda: int(os.getenv("REFRESH_EXPIRES_DAYS", "7"))
    )
    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    )
    dashboard_cache_ttl: int = field(
        default_factory=lambda: int(os.getenv("DASHBOARD_CACHE_TTL", "300"))
    )
    low_cash_threshold: float = field(
        default_factory=lambda: float(os.getenv("LOW_CASH_THRESHOLD", "10000"))
    )
    budget_alert_threshold: float = field(
        default_factory=lambda: float(os.getenv("BUDGET_ALERT_THRESHOLD", "0.8"))
    )
    auto_migrate: bool = field(default_factory=lambda: _flag("AUTO_MIGRATE"))
    config_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("CONFIG_DIR", str(Path(__file__).parent.parent.parent / "config"))
        )
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"
