"""Unit tests configuration file."""

import os

import pytest

TESTS_DIR = os.path.dirname(os.path.realpath(__file__))


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def schema_path():
    """Path to the sample schema shared by the schema file tests."""
    return os.path.join(TESTS_DIR, "schemafile", "records.jfs")
