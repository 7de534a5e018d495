"""
Tests for core.exceptions module
"""

import pytest
from core.exceptions import (
    JsInlineError,
    OutputMissing,
    ResolutionError,
    MinifierUnavailable,
    MinifyError,
    FileIOError,
    ValidationError,
    ConfigurationError
)


def test_base_exception():
    """Test JsInlineError base exception"""
    with pytest.raises(JsInlineError):
        raise JsInlineError("Test error")


def test_output_missing():
    """Test OutputMissing"""
    error = OutputMissing("/path/to/dist")
    assert error.output_dir == "/path/to/dist"
    assert "/path/to/dist" in str(error)


def test_output_missing_custom_message():
    """Test OutputMissing with custom message"""
    error = OutputMissing("/path/to/dist", "Custom message")
    assert error.output_dir == "/path/to/dist"
    assert str(error) == "Custom message"


def test_resolution_error_keeps_attempts():
    """Test ResolutionError carries every attempted path in order"""
    error = ResolutionError("./app.js", ["/a/app.js", "/b/app.js"])
    assert error.src == "./app.js"
    assert error.attempted == ["/a/app.js", "/b/app.js"]
    assert "./app.js" in str(error)
    assert "2 paths attempted" in str(error)


def test_resolution_error_without_attempts():
    """Test ResolutionError with no attempts"""
    error = ResolutionError("app.js")
    assert error.attempted == []


def test_minifier_unavailable():
    """Test MinifierUnavailable"""
    error = MinifierUnavailable("calmjs.parse", "No module named 'calmjs'")
    assert error.module == "calmjs.parse"
    assert "calmjs.parse" in str(error)
    assert "No module named" in str(error)


def test_minify_error():
    """Test MinifyError"""
    error = MinifyError("app.js", "unexpected token")
    assert error.src == "app.js"
    assert error.reason == "unexpected token"
    assert "app.js" in str(error)


def test_file_io_error():
    """Test FileIOError"""
    error = FileIOError("/dist/index.html", "Permission denied")
    assert error.file_path == "/dist/index.html"
    assert "Permission denied" in str(error)


def test_validation_error():
    """Test ValidationError"""
    error = ValidationError("minify", "Invalid value")
    assert error.parameter == "minify"
    assert "minify" in str(error)
    assert "Invalid value" in str(error)


def test_configuration_error():
    """Test ConfigurationError"""
    error = ConfigurationError("Missing key", config_file="config.yaml")
    assert error.config_file == "config.yaml"
    assert "config.yaml" in str(error)
    assert "Missing key" in str(error)


def test_exception_hierarchy():
    """Test exception hierarchy"""
    for exc in (OutputMissing, ResolutionError, MinifierUnavailable, MinifyError,
                FileIOError, ValidationError, ConfigurationError):
        assert issubclass(exc, JsInlineError)
