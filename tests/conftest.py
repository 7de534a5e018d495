"""
Pytest configuration and fixtures for JS Inliner tests
"""

import pytest
from pathlib import Path
import tempfile
import shutil
import types

from core.config import ConfigManager


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture(autouse=True)
def isolated_cwd(temp_dir, monkeypatch):
    """Run every test from an empty working directory with no cached config"""
    monkeypatch.chdir(temp_dir)
    ConfigManager().clear_cache()
    yield
    ConfigManager().clear_cache()


@pytest.fixture
def write_file():
    """Write a UTF-8 text file, creating parent directories"""
    def _write(path, content):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode('utf-8'))
        return path
    return _write


@pytest.fixture
def dist_dir(temp_dir):
    """Empty build output directory"""
    path = temp_dir / "dist"
    path.mkdir()
    return path


@pytest.fixture
def sample_dist(dist_dir, write_file):
    """Build output with a marked script, an unmarked script and a CDN script"""
    write_file(dist_dir / "app.js", "console.log(1);")
    write_file(dist_dir / "vendor.js", "var vendor = true;")
    write_file(dist_dir / "index.html", """<!DOCTYPE html>
<html>
<head>
<script src="./app.js" inline></script>
<script src="./vendor.js"></script>
<script src="https://cdn.example.com/lib.js" inline></script>
</head>
<body></body>
</html>
""")
    return dist_dir


@pytest.fixture
def stage_log(caplog, monkeypatch):
    """Capture records of the inlining stage (its loggers do not propagate)"""
    import js_inliner
    monkeypatch.setattr(js_inliner.logger, 'propagate', True)
    return caplog


class FakeNode:
    """Minimal syntax tree node: keyword arguments become attributes"""

    def __init__(self, **attrs):
        self.__dict__.update(attrs)


class FakeDebugger(FakeNode):
    pass


class FakeEmptyStatement(FakeNode):
    def __init__(self, value):
        super().__init__(value=value)


FAKE_ASTTYPES = types.SimpleNamespace(
    Node=FakeNode,
    Debugger=FakeDebugger,
    EmptyStatement=FakeEmptyStatement,
)


@pytest.fixture
def fake_backend():
    """
    Factory for importers standing in for the calmjs.parse modules.

    The fake parser splits on ';' (a bare 'debugger' becomes a debugger node)
    and the fake printer drops spaces. Printer keyword arguments are appended
    to calls when given; sources containing fail_on raise ValueError.
    """
    def make(fail_on=None, calls=None):
        def es5(source):
            if fail_on and fail_on in source:
                raise ValueError(f"Unexpected token {fail_on}")
            statements = []
            for text in source.split(';'):
                text = text.strip()
                if text == 'debugger':
                    statements.append(FakeDebugger())
                elif text:
                    statements.append(FakeNode(text=text))
            return FakeNode(children=statements)

        def minify_print(program, **kwargs):
            if calls is not None:
                calls.append(kwargs)
            return ''.join(
                s.text.replace(' ', '') + ';'
                for s in program.children if hasattr(s, 'text')
            )

        module = types.SimpleNamespace(es5=es5, minify_print=minify_print, **vars(FAKE_ASTTYPES))
        return lambda name: module
    return make


@pytest.fixture
def fake_asttypes():
    """Node classes matching the fake_backend parser"""
    return FAKE_ASTTYPES
