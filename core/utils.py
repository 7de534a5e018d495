"""
Utility classes and functions for JS Inliner

This module provides common utilities used across multiple modules.
"""

from pathlib import Path
from typing import Dict, List, Optional, Any
from .logging_config import get_logger
from .exceptions import ValidationError, ConfigurationError
from .config import ConfigManager

logger = get_logger(__name__)


TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')


class ParamParser:
    """
    Utility class for parsing parameter strings.

    Handles parameter strings in the format: "key1=value1;key2=value2"
    """

    @staticmethod
    def parse(params: str) -> Dict[str, str]:
        """
        Parse parameter string into dictionary.

        Args:
            params: Parameter string (e.g., "key1=value1;key2=value2")

        Returns:
            Dictionary of parameters
        """
        if not params or not params.strip():
            return {}

        param_dict = {}
        for param in params.split(';'):
            param = param.strip()
            if '=' in param:
                key, value = param.split('=', 1)
                param_dict[key.strip()] = value.strip()

        return param_dict

    @staticmethod
    def get(
        params: str,
        key: str,
        default: Optional[str] = None,
        required: bool = False
    ) -> Optional[str]:
        """
        Get a specific parameter value.

        Args:
            params: Parameter string
            key: Parameter key to retrieve
            default: Default value if key not found
            required: If True, raises ValidationError if key not found

        Returns:
            Parameter value or default

        Raises:
            ValidationError: If required=True and key not found
        """
        param_dict = ParamParser.parse(params)
        value = param_dict.get(key, default)

        if required and value is None:
            raise ValidationError(key, f"Required parameter '{key}' not provided")

        return value

    @staticmethod
    def get_bool(params: str, key: str, default: Optional[bool] = False) -> Optional[bool]:
        """Get boolean parameter value."""
        value = ParamParser.get(params, key)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ValidationError(key, f"Invalid boolean value: {value}")

    @staticmethod
    def get_list(
        params: str,
        key: str,
        separator: str = ',',
        default: Optional[List[str]] = None
    ) -> List[str]:
        """Get list parameter value."""
        value = ParamParser.get(params, key)
        if value is None:
            return default or []
        return [item.strip() for item in value.split(separator) if item.strip()]


class InlineConfig:
    """
    Utility class for managing inlining configuration.

    Provides centralized access to the ``jsInline`` section of config.yaml,
    layered over built-in defaults.
    """

    SECTION = 'jsInline'

    DEFAULTS: Dict[str, Any] = {
        'outputDir': 'dist',
        'minify': False,
        'scriptTagPattern': r'<script\s+[^>]*src=["\']([^"\']+)["\'][^>]*>\s*</script>',
        'sourceDirs': ['src', 'public'],
        'inlineAll': False,
        'inlineMarker': 'inline',
    }

    # Tool option name -> ScriptInliner keyword argument
    OPTION_ARGUMENTS = {
        'minify': 'minify',
        'scriptTagPattern': 'script_tag_pattern',
        'transformContent': 'transform_content',
        'sourceDirs': 'source_dirs',
        'inlineAll': 'inline_all',
        'inlineMarker': 'inline_marker',
    }

    BOOL_KEYS = ('minify', 'inlineAll')
    STR_KEYS = ('outputDir', 'scriptTagPattern', 'inlineMarker')

    @classmethod
    def get_config(cls, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Get inlining configuration from config.yaml.

        An explicitly given config file must load; an auto-discovered one that
        fails to load is reported and the defaults are used instead.

        Args:
            config_path: Optional explicit path to a config file

        Returns:
            Dictionary with every key of DEFAULTS

        Raises:
            ConfigurationError: If an explicit file is invalid, or the section
                holds values of the wrong type
        """
        config_mgr = ConfigManager()

        if config_path is not None:
            config = config_mgr.read_config(Path(config_path))
        else:
            try:
                config = config_mgr.load_config()
            except ConfigurationError as e:
                logger.warning(f"Could not load inline config: {e}, using defaults")
                config = {}

        section = config.get(cls.SECTION) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"'{cls.SECTION}' section must be a mapping",
                str(config_path) if config_path else None
            )

        merged = dict(cls.DEFAULTS)
        merged['sourceDirs'] = list(cls.DEFAULTS['sourceDirs'])
        for key, value in section.items():
            if key not in cls.DEFAULTS:
                logger.warning(f"Ignoring unknown '{cls.SECTION}' option: {key}")
                continue
            merged[key] = cls._check_value(key, value)

        return merged

    @classmethod
    def _check_value(cls, key: str, value: Any) -> Any:
        if key in cls.BOOL_KEYS and not isinstance(value, bool):
            raise ConfigurationError(f"'{cls.SECTION}.{key}' must be true or false")
        if key in cls.STR_KEYS and not isinstance(value, str):
            raise ConfigurationError(f"'{cls.SECTION}.{key}' must be a string")
        if key == 'sourceDirs':
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"'{cls.SECTION}.sourceDirs' must be a list of directories")
        return value

    @staticmethod
    def from_params(params: str) -> Dict[str, Any]:
        """
        Extract inlining options from a parameter string.

        Only keys present in the string are returned, so the result can be
        layered over get_config().

        Args:
            params: e.g. "minify=true;inlineAll=false;sourceDirs=src,static"

        Returns:
            Dictionary of overrides
        """
        overrides: Dict[str, Any] = {}
        param_dict = ParamParser.parse(params)

        for key in InlineConfig.BOOL_KEYS:
            if key in param_dict:
                overrides[key] = ParamParser.get_bool(params, key)
        for key in InlineConfig.STR_KEYS:
            if key in param_dict:
                overrides[key] = param_dict[key]
        if 'sourceDirs' in param_dict:
            overrides['sourceDirs'] = ParamParser.get_list(params, 'sourceDirs')

        unknown = set(param_dict) - set(InlineConfig.DEFAULTS)
        for key in sorted(unknown):
            logger.warning(f"Ignoring unknown parameter: {key}")

        return overrides

    @classmethod
    def resolve_settings(
        cls,
        output_dir: Optional[str] = None,
        params: str = '',
        config_path: Optional[Path] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Layer every settings source into ScriptInliner keyword arguments.

        Order, lowest first: built-in defaults, the jsInline section of
        config.yaml, the params string, keyword options, then output_dir.

        Returns:
            Dictionary with 'output_dir' plus one entry per OPTION_ARGUMENTS value

        Raises:
            ValidationError: If an option name is unknown or a params value is malformed
            ConfigurationError: If the config file is invalid
        """
        options = options or {}
        unknown = set(options) - set(cls.OPTION_ARGUMENTS)
        if unknown:
            raise ValidationError('options', f"Unknown option(s): {', '.join(sorted(unknown))}")

        settings = cls.get_config(config_path)
        settings.update(cls.from_params(params))
        settings.update(options)
        if output_dir is not None:
            settings['outputDir'] = output_dir

        kwargs = {
            argument: settings[option]
            for option, argument in cls.OPTION_ARGUMENTS.items()
            if option in settings
        }
        kwargs['output_dir'] = settings['outputDir']
        return kwargs
