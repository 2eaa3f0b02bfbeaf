"""Configuration management for donow."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .utils.validation import MalformedError, validate_priority

logger = logging.getLogger(__name__)


@dataclass
class ConfigModel:
    """Global configuration model for donow."""

    # File locations
    todo_file: str = "~/todo.txt"
    config_dir: str = "~/.donow"

    # New tasks
    add_creation_date: bool = True
    default_priority: Optional[str] = None  # "A".."Z" or None

    # Display preferences
    show_completed: bool = True
    no_color: bool = False

    # Behavior settings
    sort_on_save: bool = False
    log_level: str = "WARNING"

    def __post_init__(self):
        """Post-initialization setup.

        Raises:
            TypeError: If a path, flag or level has the wrong type
        """
        for name in ("todo_file", "config_dir", "log_level"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be a string, got {getattr(self, name)!r}")
        for name in ("add_creation_date", "show_completed", "no_color", "sort_on_save"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be true or false, got {getattr(self, name)!r}")

        self.todo_file = os.path.expanduser(self.todo_file)
        self.config_dir = os.path.expanduser(self.config_dir)

        if isinstance(self.default_priority, str):
            self.default_priority = self.default_priority.strip().upper() or None
        try:
            self.default_priority = validate_priority(self.default_priority)
        except MalformedError:
            logger.warning("Ignoring invalid default_priority %r", self.default_priority)
            self.default_priority = None

        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            logger.warning("Ignoring unknown log_level %r", self.log_level)
            self.log_level = "WARNING"

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "todo_file": self.todo_file,
            "config_dir": self.config_dir,
            "add_creation_date": self.add_creation_date,
            "default_priority": self.default_priority,
            "show_completed": self.show_completed,
            "no_color": self.no_color,
            "sort_on_save": self.sort_on_save,
            "log_level": self.log_level,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML, dropping unknown keys."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")

        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning("Ignoring unknown config key %r", key)

        return cls(**{key: value for key, value in data.items() if key in known})

    def get_config_path(self) -> Path:
        """Get the config file path."""
        return Path(self.config_dir) / "config.yaml"


class Config:
    """Configuration manager for donow."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file or fall back to defaults."""
        if cls._instance is not None:
            return cls._instance

        config = ConfigModel()

        if config_path is None:
            config_path = config.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding="utf-8") as f:
                    yaml_content = f.read()
                config = ConfigModel.from_yaml(yaml_content)
                logger.debug("Loaded configuration from %s", config_path)
            except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
                logger.warning("Failed to load config from %s: %s; using defaults", config_path, e)
        else:
            logger.debug("No configuration at %s; using defaults", config_path)

        cls._instance = config
        return config

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = config.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding="utf-8") as f:
            f.write(config.to_yaml())
        logger.info("Configuration saved to %s", config_path)

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reload(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Reload configuration from file."""
        cls._instance = None
        return cls.load(config_path)


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    Config.save(config, config_path)
