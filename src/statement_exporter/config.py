"""Configuration loading and validation for the statement exporter."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from statement_exporter.utils.date_utils import DEFAULT_DISPLAY_FORMAT
from statement_exporter.utils.logging_config import get_logger

logger = get_logger(__name__)

# Environment variable overriding the export directory
EXPORT_DIR_ENV = "STATEMENT_EXPORT_DIR"

DELIVERY_MODES = ("auto", "save", "share", "none")


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


def default_export_directory() -> Path:
    """Documents folder if the user has one, else the temp directory."""
    documents = Path.home() / "Documents"
    if documents.is_dir():
        return documents / "Statement Exports"
    return Path(tempfile.gettempdir()) / "statement_exports"


@dataclass
class OutputConfig:
    """Configuration for export generation.

    Attributes:
        directory: Directory the .xlsx files are written to.
        date_format: strftime pattern for the Transactions date column.
        decimal_places: Rounding applied to amounts and totals.
    """

    directory: Path = field(default_factory=default_export_directory)
    date_format: str = DEFAULT_DISPLAY_FORMAT
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        directory = data.get("directory")
        decimal_places = int(data.get("decimal_places", 2))  # type: ignore[arg-type]
        if not 0 <= decimal_places <= 10:
            raise ConfigError(f"decimal_places must be between 0 and 10, got {decimal_places}")
        return cls(
            directory=Path(str(directory)).expanduser() if directory else default_export_directory(),
            date_format=str(data.get("date_format", DEFAULT_DISPLAY_FORMAT)),
            decimal_places=decimal_places,
        )


@dataclass
class DeliveryConfig:
    """Configuration for handing exports to the user.

    Attributes:
        mode: One of auto, save, share, none.
        save_directory: Destination used by the save target when no
            interactive chooser is available.
    """

    mode: str = "auto"
    save_directory: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DeliveryConfig":
        """Create from dictionary."""
        mode = str(data.get("mode", "auto")).lower()
        if mode not in DELIVERY_MODES:
            raise ConfigError(
                f"delivery.mode must be one of {', '.join(DELIVERY_MODES)}, got '{mode}'"
            )
        save_directory = data.get("save_directory")
        return cls(
            mode=mode,
            save_directory=Path(str(save_directory)).expanduser() if save_directory else None,
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "statement_exporter.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "statement_exporter.log")),
        )


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        output: Export generation configuration.
        delivery: Delivery configuration.
        logging: Logging configuration.
    """

    output: OutputConfig = field(default_factory=OutputConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_config(settings_path: Optional[Path] = None) -> Config:
    """Load configuration from a settings.yaml file.

    Missing files fall back to defaults. The STATEMENT_EXPORT_DIR
    environment variable overrides output.directory.

    Args:
        settings_path: Path to settings.yaml (default: config/settings.yaml).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    if settings_path is None:
        settings_path = Path("config") / "settings.yaml"

    config = Config()
    if settings_path.exists():
        data = load_yaml_file(settings_path)
        try:
            config.output = OutputConfig.from_dict(_section(data, "output"))
            config.delivery = DeliveryConfig.from_dict(_section(data, "delivery"))
            config.logging = LoggingConfig.from_dict(_section(data, "logging"))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {settings_path}: {e}") from e
        logger.info(f"Loaded settings from {settings_path}")
    else:
        logger.debug(f"Settings file not found: {settings_path}, using defaults")

    env_dir = os.environ.get(EXPORT_DIR_ENV)
    if env_dir:
        config.output.directory = Path(env_dir).expanduser()
        logger.debug(f"Export directory overridden by {EXPORT_DIR_ENV}: {env_dir}")

    return config
