"""Configuration management for ttrk."""

import copy
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

from ttrk.core.errors import ConfigError


def default_config_path() -> Path:
    """Get the default config file path (``~/.ttrk/config.yml``)."""
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as e:
        raise ConfigError(f"Failed to find home directory: {e}") from e
    return home / ".ttrk" / "config.yml"


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "logfile": "~/.ttrk.json",
            "editor": None,
            "week_start": "sunday",
        },
        "advanced": {
            "log_level": "WARNING",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "general": {
                "type": "object",
                "properties": {
                    "logfile": {"type": "string", "minLength": 1},
                    "editor": {"type": ["string", "null"]},
                    "week_start": {"type": "string", "enum": ["monday", "sunday"]},
                },
                "additionalProperties": False,
            },
            "advanced": {
                "type": "object",
                "properties": {
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                },
                "additionalProperties": False,
            },
        },
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. Defaults to ~/.ttrk/config.yml
        """
        if config_path is None:
            config_path = default_config_path()
        self.config_path = Path(config_path).expanduser()
        self._config: dict[str, Any] = {}
        self._load_or_create()

    def _load_or_create(self) -> None:
        """Load existing config or create default."""
        if self.config_path.exists():
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    loaded_config = yaml.safe_load(f) or {}
                if not isinstance(loaded_config, dict):
                    raise ConfigError("Config file must contain a mapping")
                # Merge with defaults to ensure all keys exist
                self._config = self._merge_with_defaults(loaded_config)
                self.validate()
            except (yaml.YAMLError, ConfigError) as e:
                # Back up the broken config and start over from defaults
                backup_path = self.config_path.with_suffix(".yml.backup")
                self.config_path.replace(backup_path)
                self._config = copy.deepcopy(self.DEFAULT_CONFIG)
                self.save()
                raise ConfigError(
                    f"Config validation failed, backed up to {backup_path}. "
                    f"Using defaults. Error: {e}"
                ) from e
        else:
            self._config = copy.deepcopy(self.DEFAULT_CONFIG)
            self.save()

    def _merge_with_defaults(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge config with defaults to ensure all keys exist.

        Args:
            config: User configuration

        Returns:
            Merged configuration with all default keys
        """
        result = copy.deepcopy(self.DEFAULT_CONFIG)
        self._deep_merge(result, config)
        return result

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> None:
        """Deep merge override into base dictionary (in-place)."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'general.logfile')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get('general.week_start')
            'sunday'
            >>> config.get('nonexistent.key', 'default')
            'default'
        """
        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation.

        The configuration is left unchanged if the new value is invalid.

        Args:
            key: Configuration key in dot notation
            value: Value to set

        Raises:
            ConfigError: If configuration would be invalid after setting

        Example:
            >>> config.set('general.week_start', 'monday')
        """
        candidate = copy.deepcopy(self._config)
        keys = key.split(".")
        section = candidate
        for k in keys[:-1]:
            if not isinstance(section.get(k), dict):
                section[k] = {}
            section = section[k]
        section[keys[-1]] = value

        self._validate(candidate)
        self._config = candidate
        self.save()

    def _validate(self, config: dict[str, Any]) -> None:
        try:
            validate(instance=config, schema=self.CONFIG_SCHEMA)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e.message}") from e

    def validate(self) -> bool:
        """Validate configuration against schema.

        Returns:
            True if valid

        Raises:
            ConfigError: If configuration is invalid
        """
        self._validate(self._config)
        return True

    def save(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self._config, f, default_flow_style=False, sort_keys=False, allow_unicode=True
            )

    def reset(self) -> None:
        """Reset to default configuration."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        """Get full configuration as dictionary."""
        return copy.deepcopy(self._config)

    def get_all_keys(self, prefix: str = "") -> list[str]:
        """Get all configuration keys in dot notation.

        Args:
            prefix: Prefix for recursive traversal (internal use)

        Returns:
            List of all configuration keys

        Example:
            >>> config.get_all_keys()
            ['version', 'general.logfile', 'general.editor', ...]
        """
        keys = []
        config = self._config if not prefix else self.get(prefix, {})

        if isinstance(config, dict):
            for key, value in config.items():
                full_key = f"{prefix}.{key}" if prefix else key
                if isinstance(value, dict):
                    keys.extend(self.get_all_keys(full_key))
                else:
                    keys.append(full_key)
        return keys
