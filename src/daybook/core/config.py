"""Configuration management for Daybook."""

import copy
import logging
import secrets
from pathlib import Path
from typing import Any, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".daybook"


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "data_dir": "~/.daybook/data",
            "week_start": "monday",
            "currency_symbol": "$",
        },
        "auth": {
            "session_expiry_hours": 720,
            "secret_key": None,
            "remember_email": None,
        },
        "export": {
            "default_format": "csv",
            "include_metadata": True,
        },
        "display": {
            "hours_precision": 2,
            "show_ids": True,
        },
        "advanced": {
            "log_level": "WARNING",
            "log_file": None,
            "backup_on_start": False,
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "general": {
                "type": "object",
                "properties": {
                    "data_dir": {"type": "string"},
                    "week_start": {"type": "string", "enum": ["monday", "sunday"]},
                    "currency_symbol": {"type": "string"},
                },
            },
            "auth": {
                "type": "object",
                "properties": {
                    "session_expiry_hours": {
                        "type": "integer",
                        "minimum": 1,
                        "maximum": 8760,
                    },
                    "secret_key": {"type": ["string", "null"]},
                    "remember_email": {"type": ["string", "null"]},
                },
            },
            "export": {
                "type": "object",
                "properties": {
                    "default_format": {"type": "string", "enum": ["csv", "json"]},
                    "include_metadata": {"type": "boolean"},
                },
            },
            "display": {
                "type": "object",
                "properties": {
                    "hours_precision": {"type": "integer", "minimum": 0, "maximum": 4},
                    "show_ids": {"type": "boolean"},
                },
            },
            "advanced": {
                "type": "object",
                "properties": {
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                    "log_file": {"type": ["string", "null"]},
                    "backup_on_start": {"type": "boolean"},
                },
            },
        },
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. Defaults to ~/.daybook/config.yml
        """
        if config_path is None:
            config_path = DEFAULT_HOME / "config.yml"
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self._load_or_create()

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
                self.config_path.replace(backup_path)
                self._config = copy.deepcopy(self.DEFAULT_CONFIG)
                self.save()
                logger.warning(f"Invalid config backed up to {backup_path}: {e}")
                raise ValueError(
                    f"Config validation failed, backed up to {backup_path}. "
                    f"Using defaults. Error: {e}"
                )
        else:
            self._config = copy.deepcopy(self.DEFAULT_CONFIG)
            self.save()
            logger.debug(f"Created default config at {self.config_path}")

    def _merge_with_defaults(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge config with defaults so every default key exists."""
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
            key: Configuration key in dot notation (e.g., 'general.week_start')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config.get('general.week_start')
            'monday'
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
        """Set configuration value using dot notation and save.

        Raises:
            ValueError: If configuration is invalid after setting. The
                previous configuration is kept in that case.
        """
        previous = copy.deepcopy(self._config)
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value
        try:
            self.validate()
        except ValueError:
            self._config = previous
            raise
        self.save()

    def validate(self) -> bool:
        """Validate configuration against schema.

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
        """Reset to default configuration, keeping the session secret."""
        secret_key = self.get("auth.secret_key")
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._config["auth"]["secret_key"] = secret_key
        self.save()

    def to_dict(self) -> dict[str, Any]:
        """Get a copy of the full configuration."""
        return copy.deepcopy(self._config)

    def get_all_keys(self, prefix: str = "") -> list[str]:
        """Get all configuration keys in dot notation.

        Example:
            >>> config.get_all_keys()
            ['version', 'general.data_dir', 'general.week_start', ...]
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

    def data_dir(self) -> Path:
        """Resolved data directory."""
        return Path(self.get("general.data_dir")).expanduser()

    def ensure_secret_key(self) -> str:
        """Return the session signing key, generating and saving one if needed."""
        secret_key: Optional[str] = self.get("auth.secret_key")
        if not secret_key:
            # 256-bit random key
            secret_key = secrets.token_urlsafe(32)
            self.set("auth.secret_key", secret_key)
        return secret_key
