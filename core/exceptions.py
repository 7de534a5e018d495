"""
Custom exceptions for JS Inliner

This module defines all custom exceptions used throughout the application.
"""

from typing import List, Optional


class JsInlineError(Exception):
    """Base exception for all JS Inliner errors"""
    pass


class OutputMissing(JsInlineError):
    """Raised when the build output directory does not exist"""

    def __init__(self, output_dir: str, message: str = None):
        self.output_dir = output_dir
        if message is None:
            message = f"Output directory not found: {output_dir}"
        super().__init__(message)


class ResolutionError(JsInlineError):
    """Raised when a referenced script cannot be found in any search location"""

    def __init__(self, src: str, attempted: Optional[List[str]] = None):
        self.src = src
        self.attempted = list(attempted or [])
        super().__init__(
            f"Could not find JavaScript file to inline: {src} "
            f"({len(self.attempted)} paths attempted)"
        )


class MinifierUnavailable(JsInlineError):
    """Raised when the minifier backend cannot be loaded"""

    def __init__(self, module: str, reason: str = None):
        self.module = module
        message = f"Minifier '{module}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MinifyError(JsInlineError):
    """Raised when the minifier fails on a specific script"""

    def __init__(self, src: str, reason: str):
        self.src = src
        self.reason = reason
        super().__init__(f"Minification error for {src}: {reason}")


class FileIOError(JsInlineError):
    """Raised when an HTML or script file cannot be read or written"""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"I/O error on {file_path}: {reason}")


class ValidationError(JsInlineError):
    """Raised when input validation fails"""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"Validation error for '{parameter}': {message}")


class ConfigurationError(JsInlineError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_file: str = None):
        self.config_file = config_file
        if config_file:
            message = f"Configuration error in {config_file}: {message}"
        super().__init__(message)
