"""Pytest configuration and fixtures for layerconf tests."""

import logging
from pathlib import Path

import orjson
import pytest

from layerconf.logger import get_state


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for layerconf loggers during tests.

    The root ``layerconf`` logger stops propagating after setup_logging();
    letting records propagate allows pytest's caplog fixture to capture
    them.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name == "layerconf" or name.startswith("layerconf."):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logging.getLogger(name).propagate = propagate_value


@pytest.fixture(autouse=True)
def reset_suppression():
    """Make sure no test leaks an active suppressed_logging() block."""
    yield
    get_state().suppress_depth = 0


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Provide an empty temporary configuration directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def default_file(tmp_path: Path) -> Path:
    """Provide a default config file as shipped with an application."""
    default_file = tmp_path / "def_config.json"
    default_file.write_bytes(
        orjson.dumps(
            {
                "var1": 10,
                "ratio": 0.75,
                "name": "example",
                "enabled": True,
                "tags": ["a", "b"],
                "limits": {"low": 1, "high": {"soft": 5, "hard": 9}},
                "unset": None,
            },
            option=orjson.OPT_INDENT_2,
        )
    )
    return default_file
