"""Configuration loading from files and environment."""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from iaasctl.domain.core.exceptions import ConfigurationError
from iaasctl.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = "IAASCTL_CONFIG"
DEFAULT_CONFIG_FILES = ("iaasctl.yaml", "iaasctl.yml", "iaasctl.json")

# ${VAR} or ${VAR:default}
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

ENV_OVERRIDES = {
    "IAASCTL_LOG_LEVEL": ("logging", "level"),
    "IAASCTL_CATALOG_PATH": ("catalog", "path"),
    "IAASCTL_CATALOG_TYPE": ("catalog", "type"),
}


def expand_env_vars(value: Any) -> Any:
    """Expand ${VAR} and ${VAR:default} in strings, recursing into containers."""
    if isinstance(value, str):
        def _replace(match):
            name, default = match.group(1), match.group(2)
            if name in os.environ:
                return os.environ[name]
            if default is not None:
                return default
            return match.group(0)
        return _ENV_PATTERN.sub(_replace, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


class ConfigurationLoader:
    """Loads raw configuration dictionaries."""

    @staticmethod
    def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
        """Resolve the configuration file: explicit path, env var, then working directory."""
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigurationError(f"Configuration file {config_path} does not exist")
            return path
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
            if not path.exists():
                raise ConfigurationError(f"Configuration file {env_path} from {CONFIG_ENV_VAR} does not exist")
            return path
        for candidate in DEFAULT_CONFIG_FILES:
            path = Path(candidate)
            if path.exists():
                return path
        return None

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, Any]:
        """Parse a YAML (or JSON) configuration file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        logger.debug(f"Loaded configuration from {path}")
        return data

    @staticmethod
    def apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply IAASCTL_* environment variable overrides."""
        result = copy.deepcopy(config)
        for env_name, (section, key) in ENV_OVERRIDES.items():
            if env_name in os.environ:
                section_data = result.setdefault(section, {})
                if not isinstance(section_data, dict):
                    raise ConfigurationError(f"Configuration section '{section}' must be a mapping")
                section_data[key] = os.environ[env_name]
        return result

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load, expand and override configuration."""
        path = cls.find_config_file(config_path)
        data = cls.load_from_file(path) if path else {}
        data = expand_env_vars(data)
        return cls.apply_environment_overrides(data)
