"""
Core module for JS Inliner

This module provides common utilities and infrastructure:
- Custom exceptions
- Configuration management
- Logging setup
- Utility classes (ParamParser, InlineConfig)
"""

from .exceptions import (
    JsInlineError,
    OutputMissing,
    ResolutionError,
    MinifierUnavailable,
    MinifyError,
    FileIOError,
    ValidationError,
    ConfigurationError
)
from .config import ConfigManager
from .logging_config import setup_logger, get_logger, STAGE_TAG
from .utils import ParamParser, InlineConfig

__all__ = [
    'JsInlineError',
    'OutputMissing',
    'ResolutionError',
    'MinifierUnavailable',
    'MinifyError',
    'FileIOError',
    'ValidationError',
    'ConfigurationError',
    'ConfigManager',
    'setup_logger',
    'get_logger',
    'STAGE_TAG',
    'ParamParser',
    'InlineConfig',
]
