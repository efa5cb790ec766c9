"""Reconnection configuration loader.

Loads and validates token-reconnect.config.json configuration files.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
)

from .errors import ConfigurationError
from .reconnect_logging import get_logger

logger = get_logger()

# Default configuration file name
CONFIG_FILENAME = "token-reconnect.config.json"
CONFIG_ENV_VAR = "TOKEN_RECONNECT_CONFIG"

DEFAULT_NODE_LIMIT = 5000
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_ROTATION_COUNT = 3
DEFAULT_MAX_BYTES = 10485760


@dataclass
class IncludeStyles:
    """Per-category gates for the scanner."""

    fills: bool = True
    strokes: bool = True
    effects: bool = True
    corner_radius: bool = True
    spacing: bool = True
    typography: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "fills": self.fills,
            "strokes": self.strokes,
            "effects": self.effects,
            "cornerRadius": self.corner_radius,
            "spacing": self.spacing,
            "typography": self.typography,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IncludeStyles":
        """Create from dictionary."""
        return cls(
            fills=data.get("fills", True),
            strokes=data.get("strokes", True),
            effects=data.get("effects", True),
            corner_radius=data.get("cornerRadius", True),
            spacing=data.get("spacing", True),
            typography=data.get("typography", True),
        )


@dataclass
class ScanOptions:
    """Options for one scan run.

    ``node_limit`` is a hard cap: a scope with more nodes is not scanned at
    all. ``include_padding`` extends spacing detection from ``itemSpacing``
    to the four padding fields of auto-layout frames.
    """

    node_limit: int = DEFAULT_NODE_LIMIT
    include_hidden: bool = False
    include_styles: IncludeStyles = field(default_factory=IncludeStyles)
    include_padding: bool = False

    def validate(self) -> None:
        """Raise ConfigurationError for out-of-range values."""
        if isinstance(self.node_limit, bool) or not isinstance(self.node_limit, int):
            raise ConfigurationError(
                f"scan.nodeLimit must be an integer, got {self.node_limit!r}"
            )
        if self.node_limit < 1:
            raise ConfigurationError(
                f"scan.nodeLimit must be at least 1, got {self.node_limit}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nodeLimit": self.node_limit,
            "includeHidden": self.include_hidden,
            "includeStyles": self.include_styles.to_dict(),
            "includePadding": self.include_padding,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanOptions":
        """Create from dictionary."""
        return cls(
            node_limit=data.get("nodeLimit", DEFAULT_NODE_LIMIT),
            include_hidden=data.get("includeHidden", False),
            include_styles=IncludeStyles.from_dict(data.get("includeStyles", {})),
            include_padding=data.get("includePadding", False),
        )


@dataclass
class LoggingConfig:
    """Logging settings applied by the CLI."""

    level: str = "INFO"
    format: str = "text"
    file: str | None = None
    # Without an explicit file, write logs/token-reconnect.log in the project
    file_logging: bool = False
    rotation_count: int = DEFAULT_ROTATION_COUNT
    max_bytes: int = DEFAULT_MAX_BYTES

    def validate(self) -> None:
        """Raise ConfigurationError for unknown levels or formats."""
        if self.level.upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {self.level!r}"
            )
        if self.format not in ("text", "json"):
            raise ConfigurationError(
                f"logging.format must be 'text' or 'json', got {self.format!r}"
            )
        if self.rotation_count < 0:
            raise ConfigurationError(
                f"logging.rotationCount must not be negative, got {self.rotation_count}"
            )
        if self.max_bytes < 1:
            raise ConfigurationError(
                f"logging.maxBytes must be at least 1, got {self.max_bytes}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "format": self.format,
            "file": self.file,
            "fileLogging": self.file_logging,
            "rotationCount": self.rotation_count,
            "maxBytes": self.max_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=data.get("level", "INFO"),
            format=data.get("format", "text"),
            file=data.get("file"),
            file_logging=data.get("fileLogging", False),
            rotation_count=data.get("rotationCount", DEFAULT_ROTATION_COUNT),
            max_bytes=data.get("maxBytes", DEFAULT_MAX_BYTES),
        )


@dataclass
class ReconnectConfig:
    """Complete reconnection configuration."""

    scan: ScanOptions = field(default_factory=ScanOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> "ReconnectConfig":
        """Validate all sections, returning self for chaining."""
        self.scan.validate()
        self.logging.validate()
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "scan": self.scan.to_dict(),
            "logging": self.logging.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReconnectConfig":
        """Create from dictionary."""
        return cls(
            scan=ScanOptions.from_dict(data.get("scan", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )


class IncludeStylesSchema(BaseModel):
    """Shape of ``scan.includeStyles`` in a config file."""

    model_config = ConfigDict(extra="ignore")

    fills: StrictBool = True
    strokes: StrictBool = True
    effects: StrictBool = True
    corner_radius: StrictBool = Field(default=True, alias="cornerRadius")
    spacing: StrictBool = True
    typography: StrictBool = True


class ScanSchema(BaseModel):
    """Shape of the ``scan`` section."""

    model_config = ConfigDict(extra="ignore")

    node_limit: StrictInt = Field(default=DEFAULT_NODE_LIMIT, alias="nodeLimit")
    include_hidden: StrictBool = Field(default=False, alias="includeHidden")
    include_styles: IncludeStylesSchema = Field(
        default_factory=IncludeStylesSchema, alias="includeStyles"
    )
    include_padding: StrictBool = Field(default=False, alias="includePadding")


class LoggingSchema(BaseModel):
    """Shape of the ``logging`` section."""

    model_config = ConfigDict(extra="ignore")

    level: StrictStr = "INFO"
    format: StrictStr = "text"
    file: StrictStr | None = None
    file_logging: StrictBool = Field(default=False, alias="fileLogging")
    rotation_count: StrictInt = Field(
        default=DEFAULT_ROTATION_COUNT, alias="rotationCount"
    )
    max_bytes: StrictInt = Field(default=DEFAULT_MAX_BYTES, alias="maxBytes")


class ConfigFileSchema(BaseModel):
    """Types of every setting a config file may carry.

    Values are checked strictly so that ``"false"`` is rejected rather than
    read as a truthy flag. Range checks stay on the dataclasses.
    """

    model_config = ConfigDict(extra="ignore")

    scan: ScanSchema = Field(default_factory=ScanSchema)
    logging: LoggingSchema = Field(default_factory=LoggingSchema)


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    return "Invalid config values: " + "; ".join(problems)


class ConfigLoader:
    """Loader for reconnection configuration."""

    def __init__(self, project_path: Path | None = None):
        """Initialize the config loader.

        Args:
            project_path: Path to the project root. Defaults to current directory.
        """
        self.project_path = Path(project_path) if project_path else Path.cwd()

    def load(self, config_path: Path | None = None) -> ReconnectConfig:
        """Load configuration.

        Precedence (highest to lowest):
        1. Explicit config_path
        2. Environment variable TOKEN_RECONNECT_CONFIG
        3. token-reconnect.config.json in project root
        4. Default configuration

        Raises:
            ConfigurationError: If the selected file is invalid.
        """
        if config_path and config_path.exists():
            return self._load_from_file(config_path)

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            env_config_path = Path(env_path)
            if env_config_path.exists():
                return self._load_from_file(env_config_path)
            logger.warning(f"{CONFIG_ENV_VAR} points to a missing file: {env_path}")

        project_config = self.project_path / CONFIG_FILENAME
        if project_config.exists():
            return self._load_from_file(project_config)

        logger.debug("No reconnect config found, using defaults")
        return ReconnectConfig()

    def _load_from_file(self, config_path: Path) -> ReconnectConfig:
        logger.debug(f"Loading reconnect config from {config_path}")
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}", str(config_path)
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a JSON object", str(config_path)
            )
        try:
            ConfigFileSchema.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                _format_validation_error(e), str(config_path)
            ) from e
        return ReconnectConfig.from_dict(data).validate()

    def save(self, config: ReconnectConfig, config_path: Path | None = None) -> Path:
        """Save configuration to a file, defaulting to the project root."""
        if config_path is None:
            config_path = self.project_path / CONFIG_FILENAME

        content = json.dumps(config.to_dict(), indent=2)
        config_path.write_text(content, encoding="utf-8")
        logger.info(f"Saved reconnect config to {config_path}")
        return config_path


def load_config(
    project_path: Path | None = None, config_path: Path | None = None
) -> ReconnectConfig:
    """Convenience function to load reconnection configuration."""
    return ConfigLoader(project_path).load(config_path)
