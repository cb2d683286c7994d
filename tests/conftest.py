"""
Pytest configuration and shared fixtures for the metricagent test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the metricagent project.
"""

import logging
import shutil
import sys
import tempfile
import textwrap
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def write_config(temp_dir):
    """Write TOML text to a file in temp_dir and return its path."""

    def _write(text: str, name: str = "metricagent.conf") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """A small document using every plugin category."""
    return {
        "global_tags": {"dc": "us-east-1", "rack": "1a"},
        "agent": {
            "interval": "5s",
            "metric_batch_size": 500,
            "metric_buffer_limit": 5000,
            "omit_hostname": True,
        },
        "inputs": {
            "cpu": [{"percpu": False, "namepass": ["cpu"]}],
            "mem": {"name_prefix": "sys_"},
        },
        "outputs": {
            "file": [{"files": ["stdout"], "data_format": "json"}],
        },
        "processors": {"printer": [{"namepass": ["cpu"]}]},
        "aggregators": {"minmax": [{"drop_original": True}]},
    }


@pytest.fixture
def config_file(temp_dir, sample_document):
    """Dump the sample document to a config file with the toml library."""
    import toml

    path = temp_dir / "metricagent.conf"
    with open(path, "w") as f:
        toml.dump(sample_document, f)
    return path


@pytest.fixture
def registries():
    """A fresh registry bundle with the built-in plugins."""
    from metricagent.plugins import create_default_registries

    return create_default_registries()


@pytest.fixture
def clear_config_after_test():
    """Reset the process-wide configuration after a test."""
    yield
    from metricagent.config import manager

    manager._CONFIG = None
    manager._CONFIG_FILE_PATH = None


class ListAccumulator:
    """Minimal accumulator recording what plugins emit."""

    def __init__(self):
        self.fields: List[tuple] = []
        self.metrics: List[Any] = []
        self.errors: List[Exception] = []

    def add_fields(self, measurement, fields, tags=None, timestamp=None):
        self.fields.append((measurement, dict(fields), dict(tags or {})))

    def add_metric(self, metric):
        self.metrics.append(metric)

    def add_error(self, error):
        self.errors.append(error)


@pytest.fixture
def list_acc():
    return ListAccumulator()


@pytest.fixture
def error_logs(caplog):
    """Capture ERROR records and return a callable listing their messages."""
    caplog.set_level(logging.ERROR)
    return lambda: [r.getMessage() for r in caplog.records if r.levelno >= logging.ERROR]
