"""Centralized configuration management with schema validation."""
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from pydantic import ValidationError

from .schemas import Config
from ..utils.logging import get_logger, set_level

LOGGER = get_logger(__name__)


class ConfigManager:
    """Centralized configuration manager with Pydantic validation.

    Usage:
        config = ConfigManager.from_yaml("configs/default.yaml")
        window = config.get("analytics.crossover_window")
        config.set("strategy.max_retries", 5)
        chart = config.get_section("chart")
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize configuration manager.

        Args:
            config: Pydantic Config object. If None, uses default values.
        """
        self._config = config or Config()
        self._config_path: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConfigManager:
        """Load configuration from YAML file with validation.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValidationError: If config doesn't match schema
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}

        try:
            config = Config(**config_dict)
            LOGGER.info(f"Configuration loaded and validated from {config_path}")
        except ValidationError as e:
            LOGGER.error(f"Configuration validation failed: {e}")
            raise

        manager = cls(config)
        manager._config_path = config_path
        return manager

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> ConfigManager:
        """Load configuration from dictionary with validation."""
        return cls(Config(**config_dict))

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Example:
            >>> config.get("chart.max_lines")
            30
        """
        value = self._config
        for k in key.split("."):
            if hasattr(value, k):
                value = getattr(value, k)
            else:
                return default
        return value

    def get_section(self, section: str) -> Optional[Any]:
        """Get entire configuration section (e.g. ``"strategy"``) or None."""
        if hasattr(self._config, section):
            return getattr(self._config, section)
        return None

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation.

        The updated document is re-validated, so an out-of-range value raises
        ``ValidationError`` and leaves the current configuration untouched.

        Raises:
            ValueError: If key path is invalid
            ValidationError: If value doesn't match schema
        """
        keys = key.split(".")
        data = self.to_dict()
        node = data
        for k in keys[:-1]:
            if not isinstance(node.get(k), dict):
                raise ValueError(f"Invalid configuration path: {key}")
            node = node[k]
        if keys[-1] not in node:
            raise ValueError(f"Invalid configuration path: {key}")
        node[keys[-1]] = value
        self._config = Config(**data)
        LOGGER.debug(f"Configuration updated: {key} = {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return self._config.model_dump()

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        LOGGER.info(f"Configuration saved to {output_path}")

    def validate(self) -> bool:
        """Validate current configuration against schema.

        Raises:
            ValidationError: If validation fails
        """
        Config(**self.to_dict())
        return True

    def reload(self) -> None:
        """Reload configuration from the file it was loaded from.

        Raises:
            RuntimeError: If no config file path is set
        """
        if self._config_path is None:
            raise RuntimeError("Cannot reload: no configuration file path set")

        with open(self._config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}

        self._config = Config(**config_dict)
        LOGGER.info(f"Configuration reloaded from {self._config_path}")

    def merge(self, other: Dict[str, Any] | ConfigManager) -> None:
        """Merge another configuration (dict or manager) into this one."""
        if isinstance(other, ConfigManager):
            other_dict = other.to_dict()
        else:
            other_dict = other

        merged = self._deep_merge(self.to_dict(), other_dict)
        self._config = Config(**merged)
        LOGGER.info("Configuration merged")

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @property
    def config(self) -> Config:
        """Get raw Pydantic config object."""
        return self._config


_global_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance.

    Reads ``$OPENFOLIO_CONFIG`` (default ``configs/default.yaml``) on first use
    and falls back to schema defaults when the file is absent.
    """
    global _global_config
    if _global_config is None:
        config_path = Path(os.getenv("OPENFOLIO_CONFIG", "configs/default.yaml"))

        if config_path.exists():
            _global_config = ConfigManager.from_yaml(config_path)
            LOGGER.info(f"Loaded global config from {config_path}")
        else:
            _global_config = ConfigManager()
            LOGGER.info("Using default configuration")

        set_level(_global_config.config.logging.level)

    return _global_config


def set_global_config(config: ConfigManager) -> None:
    """Set global configuration manager instance."""
    global _global_config
    _global_config = config
    set_level(config.config.logging.level)
    LOGGER.info("Global configuration updated")


def reset_global_config() -> None:
    """Reset global configuration to None."""
    global _global_config
    _global_config = None
    LOGGER.info("Global configuration reset")
