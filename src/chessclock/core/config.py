"""Configuration management for ChessClock."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "storage": {
            "data_dir": "~/.chessclock/logs",
            "max_files": 5,
        },
        "daemon": {
            "socket_path": None,
            "log_level": "INFO",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "storage": {
                "type": "object",
                "properties": {
                    "data_dir": {"type": "string"},
                    "max_files": {"type": "integer", "minimum": 1},
                },
            },
            "daemon": {
                "type": "object",
                "properties": {
                    "socket_path": {"type": ["string", "null"]},
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                },
            },
        },
        "required": ["version"],
    }

    # Environment variable -> (config key, converter)
    ENV_OVERRIDES = {
        "CCD_DATA_DIR": ("storage.data_dir", str),
        "CCD_MAX_FILES": ("storage.max_files", int),
        "CCD_SOCKET_PATH": ("daemon.socket_path", str),
    }

    def __init__(self, config_path: Optional[Path] = None, use_env: bool = True):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. Defaults to ~/.chessclock/config.yml
            use_env: Apply CCD_* environment overrides on top of the file
        """
        if config_path is None:
            config_path = Path.home() / ".chessclock" / "config.yml"
        self.config_path = config_path
        self._config: dict[str, Any] = {}
        self._overrides: dict[str, Any] = {}
        self._load_or_create()
        if use_env:
            self._apply_env_overrides()

    def _load_or_create(self) -> None:
        """Load existing config or create default."""
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f) or {}
            # Merge with defaults to ensure all keys exist
            self._config = self._merge_with_defaults(loaded_config)
            try:
                self.validate()
            except ValueError as e:
                backup_path = self.config_path.with_suffix(".yml.backup")
                self.config_path.rename(backup_path)
                self._config = copy.deepcopy(self.DEFAULT_CONFIG)
                self.save()
                raise ValueError(
                    f"Config validation failed, backed up to {backup_path}. "
                    f"Using defaults. Error: {e}"
                )
        else:
            self._config = copy.deepcopy(self.DEFAULT_CONFIG)
            self.save()

    def _apply_env_overrides(self) -> None:
        """Override file values from CCD_* environment variables.

        Overrides are kept in memory only and never written back to disk.

        Raises:
            ValueError: If an override has the wrong type or fails validation
        """
        for env_name, (key, convert) in self.ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                self._overrides[key] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}")
            logger.debug(f"{env_name} overrides {key}")

        if self._overrides:
            merged = self._with_overrides()
            try:
                validate(instance=merged, schema=self.CONFIG_SCHEMA)
            except ValidationError as e:
                raise ValueError(f"Invalid environment override: {e.message}")

    def _with_overrides(self) -> dict[str, Any]:
        """Copy of the configuration with environment overrides applied."""
        merged = copy.deepcopy(self._config)
        for key, value in self._overrides.items():
            self._set_in(merged, key, value)
        return merged

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

    @staticmethod
    def _set_in(config: dict[str, Any], key: str, value: Any) -> None:
        keys = key.split(".")
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., 'storage.max_files')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get('storage.max_files')
            5
            >>> config.get('nonexistent.key', 'default')
            'default'
        """
        if key in self._overrides:
            return self._overrides[key]

        keys = key.split(".")
        value: Any = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set

        Raises:
            ValueError: If configuration is invalid after setting
        """
        previous = copy.deepcopy(self._config)
        self._set_in(self._config, key, value)
        try:
            self.validate()
        except ValueError:
            self._config = previous
            raise
        self.save()

    def validate(self) -> bool:
        """Validate configuration against schema.

        Returns:
            True if valid

        Raises:
            ValueError: If configuration is invalid
        """
        try:
            validate(instance=self._config, schema=self.CONFIG_SCHEMA)
            return True
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e.message}")

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
        """Get full configuration, environment overrides included."""
        return self._with_overrides()

    def get_all_keys(self, prefix: str = "") -> list[str]:
        """Get all configuration keys in dot notation.

        Example:
            >>> config.get_all_keys()
            ['version', 'storage.data_dir', 'storage.max_files', ...]
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

    @property
    def data_dir(self) -> Path:
        """Expanded storage directory."""
        return Path(self.get("storage.data_dir")).expanduser()

    @property
    def max_files(self) -> int:
        """Maximum number of retained time sheets."""
        return int(self.get("storage.max_files"))
