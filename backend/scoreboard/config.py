"""
Configuration Management Module
===============================
Centralized configuration system for the Mozheng Literature Cup scoreboard.

This module provides:
- Type-safe configuration via dataclasses
- Environment variable overrides
- JSON save/load for reproducible runs
- Default values with documentation

Usage:
    from scoreboard.config import get_config
    config = get_config()

    # Access configuration
    catalog = config.paths.catalog
    policy = config.scaling.on_failure

To run against another data set, save a config file and load it:
    config = load_board_config("configs/season_2.json")
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os
import json
import logging

logger = logging.getLogger(__name__)


# Policies understood by the scaling stage when a rater cannot be normalized
FAILURE_POLICIES = ("abort", "drop", "raw")


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================

@dataclass
class PathConfig:
    """Configuration for file system paths."""

    # Base directory holding the catalog and rater files
    base_dir: Path = field(default_factory=lambda: Path.cwd() / "data")

    catalog_file: str = "posts.json"
    scores_dir: str = "scores"
    logs_dir: str = "logs"

    @property
    def catalog(self) -> Path:
        return self.base_dir / self.catalog_file

    @property
    def scores(self) -> Path:
        return self.base_dir / self.scores_dir

    @property
    def logs(self) -> Path:
        return self.base_dir / self.logs_dir


@dataclass
class ScalingConfig:
    """
    Configuration for per-rater score normalization.

    on_failure decides what happens to a rater whose distribution cannot be
    brought to the target moment:
    - abort: stop building the board (default)
    - drop: leave the rater's scores out of the pool
    - raw: keep the rater's raw, unscaled values

    Each rater is independent, so raters may be scaled on a thread pool.
    Volumes are small and parallel execution only saves wall time.
    """

    on_failure: str = "abort"
    parallel: bool = False
    max_workers: int = 4

    def __post_init__(self):
        if self.on_failure not in FAILURE_POLICIES:
            raise ValueError(
                f"Unknown scaling failure policy '{self.on_failure}', "
                f"expected one of {', '.join(FAILURE_POLICIES)}"
            )


@dataclass
class FlaskConfig:
    """Configuration for the read-only API server."""

    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    cors_origins: list = field(default_factory=lambda: ["*"])


@dataclass
class LoggingConfig:
    """Configuration for logging and run identification."""

    experiment_name: str = "default"

    log_level: str = "INFO"
    log_to_file: bool = False
    log_scaling: bool = True


@dataclass
class AppConfig:
    """
    Master configuration class that aggregates all configuration sections.

    This is the main configuration object used throughout the application.
    """

    paths: PathConfig = field(default_factory=PathConfig)
    scaling: ScalingConfig = field(default_factory=ScalingConfig)
    flask: FlaskConfig = field(default_factory=FlaskConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        def convert(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: convert(v) for k, v in obj.__dict__.items()}
            elif isinstance(obj, Path):
                return str(obj)
            return obj
        return convert(self)

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Configuration saved to {filepath}")

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        """Create configuration from dictionary."""
        # base_dir travels as a string in JSON
        paths_data = dict(data.get('paths', {}))
        if 'base_dir' in paths_data and isinstance(paths_data['base_dir'], str):
            paths_data['base_dir'] = Path(paths_data['base_dir'])

        return cls(
            paths=PathConfig(**paths_data),
            scaling=ScalingConfig(**data.get('scaling', {})),
            flask=FlaskConfig(**data.get('flask', {})),
            logging=LoggingConfig(**data.get('logging', {})),
        )

    @classmethod
    def load(cls, filepath: str) -> "AppConfig":
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        logger.info(f"Configuration loaded from {filepath}")
        return cls.from_dict(data)


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global application configuration.

    Creates a default configuration on first access.

    Returns:
        The global AppConfig instance
    """
    global _config
    if _config is None:
        _config = AppConfig()
        logger.info("Initialized default application configuration")
    return _config


def set_config(config: AppConfig) -> None:
    """
    Set the global application configuration.

    Args:
        config: The AppConfig instance to use globally
    """
    global _config
    _config = config
    logger.info(f"Set global configuration (experiment: {config.logging.experiment_name})")


def reset_config() -> None:
    """Reset the global configuration to None (forces reload on next get_config)."""
    global _config
    _config = None
    logger.info("Reset global configuration")


def load_board_config(filepath: str) -> AppConfig:
    """
    Load a configuration file and set it as global.

    Args:
        filepath: Path to the configuration JSON file

    Returns:
        The loaded AppConfig instance
    """
    config = AppConfig.load(filepath)
    set_config(config)
    return config


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDES
# =============================================================================

def apply_environment_overrides(config: AppConfig) -> AppConfig:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern:
    SCOREBOARD_{SECTION}_{KEY}

    Examples:
        SCOREBOARD_SCALING_ON_FAILURE=drop
        SCOREBOARD_FLASK_PORT=8080
        SCOREBOARD_LOGGING_LOG_LEVEL=DEBUG

    Also supported:
        SCOREBOARD_DATA_DIR=/srv/cup (maps to paths.base_dir)
        PORT=8080 (maps to flask.port)

    Args:
        config: Base configuration to override

    Returns:
        Configuration with environment overrides applied
    """
    if os.getenv("SCOREBOARD_DATA_DIR"):
        config.paths.base_dir = Path(os.getenv("SCOREBOARD_DATA_DIR"))
        logger.info(f"Environment override: paths.base_dir = {config.paths.base_dir}")

    if os.getenv("PORT"):
        try:
            config.flask.port = int(os.getenv("PORT"))
            logger.info(f"Environment override: flask.port = {config.flask.port}")
        except ValueError:
            logger.warning(f"Ignoring non-integer PORT={os.getenv('PORT')}")

    prefix = "SCOREBOARD_"
    section_names = ('paths', 'scaling', 'flask', 'logging')

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        parts = key[len(prefix):].lower().split('_', 1)
        if len(parts) != 2:
            continue

        section, attr = parts
        if section not in section_names:
            continue

        section_config = getattr(config, section)
        if not hasattr(section_config, attr):
            continue

        current_value = getattr(section_config, attr)
        try:
            if isinstance(current_value, bool):
                typed_value = value.lower() in ('true', '1', 'yes')
            elif isinstance(current_value, int):
                typed_value = int(value)
            elif isinstance(current_value, float):
                typed_value = float(value)
            elif isinstance(current_value, Path):
                typed_value = Path(value)
            else:
                typed_value = value

            if section == 'scaling' and attr == 'on_failure' and typed_value not in FAILURE_POLICIES:
                raise ValueError(f"unknown policy '{typed_value}'")

            setattr(section_config, attr, typed_value)
            logger.info(f"Environment override: {section}.{attr} = {typed_value}")

        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to apply environment override {key}: {e}")

    return config


# =============================================================================
# PRESET CONFIGURATIONS
# =============================================================================

def get_development_config() -> AppConfig:
    """Get configuration for local development."""
    config = AppConfig()
    config.flask.debug = True
    config.logging.log_level = "DEBUG"
    return config


def get_production_config() -> AppConfig:
    """Get configuration for serving the board."""
    config = AppConfig()
    config.flask.debug = False
    config.scaling.parallel = True
    config.logging.log_level = "INFO"
    config.logging.log_to_file = True
    return config
