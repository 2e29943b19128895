"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ...core.constants import CONFIG_PATH
from ...core.exceptions import ConfigError
from ...core.utils import resolve_local_path

# Keys understood in config.toml, on the command line and in the environment
CONFIG_KEYS = (
    "server_address",
    "username",
    "base_directory",
    "identity_key_path",
    "timeout",
    "last_local_path",
)

ENV_MAPPINGS = {
    "SCPDECK_SERVER": "server_address",
    "SCPDECK_USER": "username",
    "SCPDECK_BASE_DIR": "base_directory",
    "SCPDECK_IDENTITY": "identity_key_path",
    "SCPDECK_TIMEOUT": "timeout",
    "SCPDECK_LOCAL_DIR": "last_local_path",
}

_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "timeout": float,
}


class ConfigLoader:
    """Configuration loader with priority support"""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file"""
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e

        unknown = sorted(set(data) - set(CONFIG_KEYS))
        if unknown:
            raise ConfigError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")
        return {key: self._convert_value(key, value) for key, value in data.items()}

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config = {}
        for env_key, config_key in ENV_MAPPINGS.items():
            value = self._environ.get(env_key)
            if value:
                config[config_key] = self._convert_value(config_key, value)
        return config

    def _convert_value(self, key: str, value: Any) -> Any:
        """Convert a raw value to the type the key expects"""
        converter = _CONVERTERS.get(key, str)
        try:
            return converter(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {value!r}") from e

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for config in configs:
            result.update({key: value for key, value in config.items() if value is not None})
        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML > defaults

        Args:
            toml_path: Path to TOML configuration file; without one the
                default config file is read when it exists
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigError: If the TOML file is missing, unparsable or holds bad values
        """
        configs = []

        # 1. Load TOML
        if toml_path:
            configs.append(self.load_toml(Path(toml_path).expanduser()))
        else:
            default_path = resolve_local_path(CONFIG_PATH)
            if default_path.exists():
                configs.append(self.load_toml(default_path))

        # 2. Load environment variables
        if use_env:
            configs.append(self.load_env())

        # 3. Apply CLI overrides (highest priority)
        if cli_overrides:
            configs.append(
                {key: self._convert_value(key, value) for key, value in cli_overrides.items() if value is not None}
            )

        return self.merge_configs(*configs)
