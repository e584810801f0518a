"""
Configuration management for binsim.

This module handles loading, saving, and validating the settings shared by
the evaluation and top-k tools: where the judgment datasets live and how
embedding files are packed.
"""

import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .core.vectors import SUPPORTED_BLOCK_SIZES
from .errors import BinsimError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class BinsimConfig:
    """Settings for loading and evaluating binary embeddings."""

    # Judgment datasets
    datasets_dir: str = "datasets"
    max_lines: int = 3500  # Per-dataset record cap, 0 disables

    # Embedding file layout
    block_size: int = 64  # Bits per packed block
    radix: int = 10  # Radix of block integers
    lenient_records: bool = False  # Keep malformed records zero-filled

    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BinsimConfig':
        """
        Create from dictionary, ignoring unknown keys.

        String values are read the way environment overrides are, so
        ``radix: '16'`` loads as 16.

        Raises:
            ConfigError: if a value cannot be read as its field's type
        """
        kinds = {f.name: type(f.default) for f in fields(cls)}
        unknown = set(data) - set(kinds)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        values = {}
        for key, value in data.items():
            if key not in kinds:
                continue
            try:
                values[key] = _coerce_value(value, kinds[key])
            except ValueError:
                raise ConfigError(
                    f"{key} must be {kinds[key].__name__}, got {value!r}",
                    details={'key': key, 'value': repr(value)}
                ) from None
        return cls(**values)

    def errors(self) -> list:
        """Return a list of human-readable validation errors."""
        errors = []

        if self.block_size not in SUPPORTED_BLOCK_SIZES:
            errors.append(f"block_size must be one of {SUPPORTED_BLOCK_SIZES}, got {self.block_size}")

        if not 2 <= self.radix <= 36:
            errors.append(f"radix must be between 2 and 36, got {self.radix}")

        if self.max_lines < 0:
            errors.append(f"max_lines must be non-negative, got {self.max_lines}")

        if str(self.log_level).upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")

        return errors

    def validate(self) -> bool:
        """Validate configuration parameters, printing any problems."""
        errors = self.errors()
        if errors:
            console = Console()
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
        return not errors


class ConfigError(BinsimError):
    """Raised when a configuration file cannot be used."""


class ConfigManager:
    """Manages binsim configuration."""

    DEFAULT_CONFIG_FILE = ".binsim.yml"
    ENV_PREFIX = "BINSIM_"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.console = Console()
        self.config_path = Path(config_path) if config_path else Path(self.DEFAULT_CONFIG_FILE)
        self._config: Optional[BinsimConfig] = None

    def load(self) -> BinsimConfig:
        """
        Load configuration from file or create default.

        Returns:
            Loaded or default configuration

        Raises:
            ConfigError: if the file is not valid YAML or holds a mistyped value
        """
        if self._config is not None:
            return self._config

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Error loading config {self.config_path}: {e}",
                                  details={'path': str(self.config_path)}) from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config {self.config_path} must be a mapping",
                                  details={'path': str(self.config_path)})
            try:
                self._config = BinsimConfig.from_dict(data)
            except ConfigError as e:
                raise ConfigError(f"Invalid config {self.config_path}: {e.message}",
                                  details={**e.details, 'path': str(self.config_path)}) from e
            logger.info(f"Loaded config from {self.config_path}")
        else:
            self._config = BinsimConfig()
            logger.debug("Using default configuration")

        self._apply_env_overrides()

        return self._config

    def save(self, config: Optional[BinsimConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save (uses current if None)

        Returns:
            True if successful
        """
        config = config or self._config or BinsimConfig()

        try:
            with open(self.config_path, 'w') as f:
                yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
            self.console.print(f"[green]Saved config to {self.config_path}[/green]")
            return True
        except OSError as e:
            self.console.print(f"[red]Error saving config: {e}[/red]")
            return False

    def update(self, **kwargs) -> BinsimConfig:
        """
        Update configuration parameters, skipping ``None`` values.

        Args:
            **kwargs: Parameters to update

        Returns:
            Updated configuration
        """
        if self._config is None:
            self._config = self.load()

        for key, value in kwargs.items():
            if value is None:
                continue
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                logger.warning(f"Unknown config parameter '{key}'")

        return self._config

    def display(self, config: Optional[BinsimConfig] = None):
        """
        Display configuration in a formatted panel.

        Args:
            config: Configuration to display (uses current if None)
        """
        config = config or self._config or self.load()

        yaml_str = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=True)
        panel = Panel(
            syntax,
            title="[bold cyan]binsim configuration[/bold cyan]",
            border_style="cyan"
        )

        self.console.print(panel)

    def _apply_env_overrides(self):
        """Apply BINSIM_* environment variable overrides."""
        if self._config is None:
            return

        for f in fields(BinsimConfig):
            raw = os.getenv(f"{self.ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            try:
                value = _coerce(raw, type(getattr(self._config, f.name)))
            except ValueError:
                logger.warning(f"Invalid env value for {f.name}: {raw}")
                continue
            setattr(self._config, f.name, value)
            logger.info(f"Applied env override: {f.name}={value}")


def _coerce(raw: str, kind: type) -> Any:
    if kind is bool:
        lowered = raw.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(raw)
    if kind is int:
        return int(raw)
    return raw


def _coerce_value(value: Any, kind: type) -> Any:
    if isinstance(value, str):
        return _coerce(value, kind)
    # bool is an int subclass; reject it for numeric fields
    if isinstance(value, bool) and kind is not bool:
        raise ValueError(value)
    if isinstance(value, kind):
        return value
    raise ValueError(value)


def get_config(config_path: Optional[Path] = None) -> BinsimConfig:
    """
    Load configuration from ``config_path`` or the default location.

    Args:
        config_path: Optional path to config file

    Returns:
        Configuration with environment overrides applied
    """
    return ConfigManager(config_path).load()


def save_config(config: BinsimConfig, config_path: Optional[Path] = None) -> bool:
    """
    Save configuration.

    Args:
        config: Configuration to save
        config_path: Optional path to config file

    Returns:
        True if successful
    """
    return ConfigManager(config_path).save(config)


def create_default_config_file(path: Optional[Path] = None) -> bool:
    """
    Create a default configuration file.

    Args:
        path: Path for config file

    Returns:
        True if successful
    """
    return save_config(BinsimConfig(), path)
