"""Pytest configuration and fixtures."""

import importlib.util
from pathlib import Path

import pytest

from machinechart.annotations import MetadataLedger
from machinechart.config import reset_settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Give every test fresh settings unaffected by the developer's environment."""
    for var in (
        "MACHINECHART_DEBUG_MODE",
        "MACHINECHART_LOG_LEVEL",
        "MACHINECHART_STRUCTURED_LOGGING",
        "MACHINECHART_LOG_FILE",
        "MACHINECHART_JSON_INDENT",
        "MACHINECHART_VALIDATE_OUTPUT",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def ledger():
    """Provide an empty ledger isolated from the process-wide one."""
    return MetadataLedger()


@pytest.fixture(scope="session")
def auth_machine_path():
    """Path of the authentication machine fixture module."""
    return FIXTURES_DIR / "auth_machine.py"


@pytest.fixture(scope="session")
def auth_machine(auth_machine_path):
    """Import the authentication machine fixture module from its file."""
    spec = importlib.util.spec_from_file_location("auth_machine_fixture", auth_machine_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def auth_state_names():
    """State classes of the authentication machine, in chart order."""
    return ["LoggedOut", "LoggingIn", "LoggedIn", "AuthError"]


@pytest.fixture
def auth_chart_config():
    """Chart configuration for the authentication machine."""
    return {
        "id": "auth",
        "initial": "LoggedOut",
        "description": "User authentication with session refresh",
    }
