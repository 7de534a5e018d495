"""
Configuration management for JS Inliner

Provides centralized configuration loading and caching.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List
import yaml

from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = 'config.yaml'


class ConfigManager:
    """
    Centralized configuration management with caching.

    This class follows the Singleton pattern to ensure only one
    instance manages configuration across the application.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config: Optional[Dict[str, Any]] = None
        self._config_path: Optional[Path] = None
        self._initialized = True

    def find_config(
        self,
        custom_paths: Optional[List[Path]] = None
    ) -> Optional[Path]:
        """
        Search for config.yaml in multiple standard locations.

        Search order:
        1. Current working directory
        2. Project directory
        3. Custom paths (if provided)

        Args:
            custom_paths: Additional paths to search

        Returns:
            Path to config.yaml if found, None otherwise
        """
        search_paths = [Path.cwd() / CONFIG_FILENAME]

        # Project directory (where the core package lives)
        project_dir = Path(__file__).parent.parent
        search_paths.append(project_dir / CONFIG_FILENAME)

        if custom_paths:
            search_paths.extend(Path(p) for p in custom_paths)

        for path in search_paths:
            if path.exists():
                logger.debug(f"Found config file: {path}")
                return path

        logger.debug(f"No {CONFIG_FILENAME} found in standard locations")
        return None

    def load_config(
        self,
        config_path: Optional[Path] = None,
        force_reload: bool = False
    ) -> Dict[str, Any]:
        """
        Load and cache configuration from file.

        Args:
            config_path: Path to config file. If None, searches standard locations.
            force_reload: Force reload even if already cached

        Returns:
            Configuration dictionary (empty when no file is found)

        Raises:
            ConfigurationError: If config file is missing or invalid
        """
        if config_path is not None:
            config_path = Path(config_path)

        if not force_reload and self._config is not None:
            if config_path is None or config_path == self._config_path:
                logger.debug("Using cached configuration")
                return self._config

        if config_path is None:
            config_path = self.find_config()
            if config_path is None:
                logger.debug(f"No {CONFIG_FILENAME} found, using defaults")
                return {}

        config = self.read_config(config_path)
        self._config = config
        self._config_path = config_path

        logger.info(f"Loaded configuration from: {config_path}")
        return config

    def read_config(self, config_path: Path) -> Dict[str, Any]:
        """
        Read one configuration file without touching the cache.

        Used for explicitly given files so that they do not replace the
        discovered configuration for later callers.

        Args:
            config_path: Path to config file

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If config file is missing or invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                str(config_path)
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML format: {e}",
                str(config_path)
            )
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load configuration: {e}",
                str(config_path)
            )

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(
                "Top-level YAML value must be a mapping",
                str(config_path)
            )
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation for nested keys)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if self._config is None:
            self.load_config()

        keys = key.split('.')
        value = self._config or {}

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def reload(self):
        """Force reload configuration from file"""
        if self._config_path:
            self.load_config(self._config_path, force_reload=True)

    def clear_cache(self):
        """Clear cached configuration"""
        self._config = None
        self._config_path = None
        logger.debug("Configuration cache cleared")


# Global instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global ConfigManager instance"""
    return _config_manager


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to config file

    Returns:
        Configuration dictionary
    """
    return _config_manager.load_config(config_path)
