from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for installation directories and logging isolation.
"""

import logging
import os
import sys

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

_TESTS_PATH = os.path.abspath(os.path.dirname(__file__))
if _TESTS_PATH not in sys.path:
    sys.path.insert(0, _TESTS_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def install_dir(tmp_path) -> str:
    """
    Create an installation directory holding an existing 'myapp' executable.

    Returns:
        str: Absolute path to the installation directory.
    """
    path = tmp_path / "install"
    path.mkdir()
    exe = path / "myapp"
    exe.write_bytes(b"old binary")
    os.chmod(exe, 0o755)
    return str(path)


@pytest.fixture
def reset_logging():
    """Detach the handlers configure_logging installs, before and after a test."""
    from selfupdate.infra.logging import shutdown_logging

    shutdown_logging()
    yield logging.getLogger()
    shutdown_logging()
