"""
conftest.py: test isolation for the fluxcheck suite.

Settings are read from FLUXCHECK_* environment variables at import time;
tests that touch them must not leak values into later tests.
"""
import os
import pytest


_ENV_KEYS_TO_PROTECT = [
    "FLUXCHECK_ALERTS_PACKAGE",
    "FLUXCHECK_THRESHOLD_FILE_NAME",
    "FLUXCHECK_PARSE_DEBUG",
    "FLUXCHECK_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env_vars():
    """Snapshot and restore fluxcheck environment variables after each test."""
    saved = {}
    for key in _ENV_KEYS_TO_PROTECT:
        if key in os.environ:
            saved[key] = os.environ[key]

    yield

    for key in _ENV_KEYS_TO_PROTECT:
        if key in saved:
            os.environ[key] = saved[key]
        else:
            os.environ.pop(key, None)
