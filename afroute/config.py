"""
afroute configuration

Configuration sources (in order of precedence):
    1. Environment variables (AFROUTE_*)
    2. Runtime overrides (ConfigManager.set)
    3. Config files: ./afroute.yaml, ./config/afroute.yaml, ~/.afroute/config.yaml
    4. Default values

Example ``afroute.yaml``:

    data:
      data_dir: /srv/afroute/countries
      default_country: ke
      strict_integrity: true
    logging:
      log_level: info
      log_format: json
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

import yaml

from afroute.core import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(Exception):
    """Configuration error."""


class ValidationError(ConfigError):
    """Configuration validation error."""


@dataclass
class ConfigValue(Generic[T]):
    """
    A single configuration value with metadata.

    Supports default values, environment variable binding and validation.
    """
    default: T
    env_var: Optional[str] = None
    description: str = ""
    validator: Optional[Callable[[T], bool]] = None
    _value: Optional[T] = field(default=None, repr=False)

    def get(self) -> T:
        """Get the current value."""
        if self.env_var and self.env_var in os.environ:
            return self._coerce(os.environ[self.env_var])

        return self._value if self._value is not None else self.default

    def set(self, value: T) -> None:
        """Set the value with validation."""
        if self.validator and not self.validator(value):
            raise ValidationError(f"Invalid value for config: {value!r}")
        self._value = value

    def reset(self) -> None:
        self._value = None

    def _coerce(self, value: str) -> T:
        """Coerce string value to target type."""
        target_type = type(self.default)

        if target_type == bool:
            return value.strip().lower() in ("true", "1", "yes", "on")  # type: ignore
        elif target_type == int:
            return int(value)  # type: ignore
        else:
            return value  # type: ignore


@dataclass
class DataConfig:
    """Where datasets live and how strictly they are loaded."""
    data_dir: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default=str(DEFAULT_DATA_DIR),
        env_var="AFROUTE_DATA_DIR",
        description="Directory holding <iso>/institutions.{json,yaml} datasets",
        validator=lambda x: isinstance(x, str) and bool(x.strip()),
    ))
    default_country: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="ng",
        env_var="AFROUTE_COUNTRY",
        description="ISO alpha-2 code of the dataset used when none is given",
        validator=lambda x: isinstance(x, str) and len(x) == 2 and x.isalpha(),
    ))
    validate_schema: ConfigValue[bool] = field(default_factory=lambda: ConfigValue(
        default=True,
        env_var="AFROUTE_VALIDATE_SCHEMA",
        description="Validate datasets against the JSON Schema before loading",
        validator=lambda x: isinstance(x, bool),
    ))
    strict_integrity: ConfigValue[bool] = field(default_factory=lambda: ConfigValue(
        default=True,
        env_var="AFROUTE_STRICT_INTEGRITY",
        description="Fail registry construction on duplicate id or legacy bank_code",
        validator=lambda x: isinstance(x, bool),
    ))


@dataclass
class LoggingConfig:
    log_level: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="warning",
        env_var="AFROUTE_LOG_LEVEL",
        description="Log level (debug, info, warning, error, critical)",
        validator=lambda x: x in _LOG_LEVELS,
    ))
    log_format: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="text",
        env_var="AFROUTE_LOG_FORMAT",
        description="Log format (text, json)",
        validator=lambda x: x in ("text", "json"),
    ))


@dataclass
class AfrouteConfig:
    """Root configuration."""
    data: DataConfig = field(default_factory=DataConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        def extract_values(obj: Any) -> Any:
            if isinstance(obj, ConfigValue):
                return obj.get()
            elif hasattr(obj, "__dataclass_fields__"):
                return {k: extract_values(getattr(obj, k)) for k in obj.__dataclass_fields__}
            return obj

        return extract_values(self)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=True)


class ConfigManager:
    """
    Configuration manager with file loading and environment binding.

    Thread-safe singleton; ``ConfigManager.reset_instance()`` discards it.
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = AfrouteConfig()
        self._config_paths: List[Path] = []
        self._initialized = True

    @classmethod
    def reset_instance(cls) -> None:
        with cls._lock:
            cls._instance = None

    @property
    def config(self) -> AfrouteConfig:
        return self._config

    @property
    def config_paths(self) -> List[Path]:
        return list(self._config_paths)

    def load_from_file(self, path: Union[str, Path]) -> None:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must be a mapping: {path}")

        self._apply_dict(data)
        self._config_paths.append(path)
        logger.debug("loaded configuration", extra={"context": {"path": str(path)}})

    def load_defaults(self) -> None:
        """Load default configuration files if they exist."""
        default_paths = [
            Path("afroute.yaml"),
            Path("config/afroute.yaml"),
            Path.home() / ".afroute" / "config.yaml",
        ]

        for path in default_paths:
            if path.exists():
                self.load_from_file(path)

    def _apply_dict(self, data: Dict[str, Any]) -> None:
        """Apply dictionary values to configuration."""
        def apply_to_config(config_obj: Any, values: Dict[str, Any], prefix: str) -> None:
            for key, value in values.items():
                if not hasattr(config_obj, key):
                    raise ConfigError(f"Unknown config key: {prefix}{key}")
                attr = getattr(config_obj, key)
                if isinstance(attr, ConfigValue):
                    attr.set(value)
                elif hasattr(attr, "__dataclass_fields__") and isinstance(value, dict):
                    apply_to_config(attr, value, f"{prefix}{key}.")
                else:
                    raise ConfigError(f"Config section {prefix}{key} must be a mapping")

        apply_to_config(self._config, data, "")

    def _resolve(self, path: str) -> Any:
        obj: Any = self._config
        for part in path.split("."):
            if not part or not hasattr(obj, part):
                raise ConfigError(f"Invalid config path: {path}")
            obj = getattr(obj, part)
        return obj

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value by path.

        Example: manager.set("data.default_country", "ke")
        """
        attr = self._resolve(path)
        if not isinstance(attr, ConfigValue):
            raise ConfigError(f"Invalid config path: {path}")
        attr.set(value)

    def get(self, path: str) -> Any:
        """
        Get a configuration value by path.

        Example: manager.get("logging.log_level")
        """
        obj = self._resolve(path)
        if isinstance(obj, ConfigValue):
            return obj.get()
        return obj

    def validate(self) -> List[str]:
        """
        Validate all configuration values, including ones read from the environment.

        Returns list of validation errors.
        """
        errors: List[str] = []

        def validate_config(obj: Any, path: str = "") -> None:
            if isinstance(obj, ConfigValue):
                try:
                    value = obj.get()
                except ValueError as e:
                    errors.append(f"{path}: {e}")
                    return
                if obj.validator and not obj.validator(value):
                    errors.append(f"{path}: validation failed for value {value!r}")
            elif hasattr(obj, "__dataclass_fields__"):
                for field_name in obj.__dataclass_fields__:
                    field_path = f"{path}.{field_name}" if path else field_name
                    validate_config(getattr(obj, field_name), field_path)

        validate_config(self._config)
        return errors


def get_config() -> AfrouteConfig:
    """Get the current afroute configuration."""
    return ConfigManager().config


def get_config_manager() -> ConfigManager:
    """Get the configuration manager instance."""
    return ConfigManager()
