"""Engine settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, keeping the default on bad input."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class RulesConfig:
    """Location of the YAML rules file and threshold defaults."""

    rules_file: Path = field(
        default_factory=lambda: Path(
            os.getenv("OPS_RULES_FILE", str(PROJECT_ROOT / "config" / "rules.yaml"))
        )
    )
    maintenance_window_days: int = field(
        default_factory=lambda: _int_env("OPS_MAINTENANCE_WINDOW_DAYS", 7)
    )
    restock_window_days: int = field(
        default_factory=lambda: _int_env("OPS_RESTOCK_WINDOW_DAYS", 7)
    )


@dataclass
class DataConfig:
    """Data paths configuration."""

    exports_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("EXPORTS_PATH", str(PROJECT_ROOT / "data" / "exports"))
        )
    )


@dataclass
class AppConfig:
    """Application configuration settings."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


@dataclass
class Config:
    """Main configuration container."""

    rules: RulesConfig = field(default_factory=RulesConfig)
    data: DataConfig = field(default_factory=DataConfig)
    app: AppConfig = field(default_factory=AppConfig)


# Global config instance
config = Config()
