from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation and handler teardown.
"""

import logging
import time
from pathlib import Path

import pytest

from selfupdate.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    shutdown_logging,
)

pytestmark = pytest.mark.usefixtures("reset_logging")


def _our_handlers(root: logging.Logger):
    return [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """TC-01: Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_log_rotation(tmp_path: Path) -> None:
    """TC-02: Files rotate when the size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")
    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # stop() drains the queue before returning
    shutdown_logging()

    assert log_file.exists()
    assert (tmp_path / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """TC-03: The root logger routes records through a tagged QueueHandler."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    assert len(_our_handlers(root)) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None
    assert getattr(root, _CONFIGURED_FLAG_ATTR) is True


def test_force_reconfigures_level() -> None:
    """TC-04: force=True replaces the previous configuration."""
    configure_logging(LoggingConfig(level="INFO"))
    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(_our_handlers(root)) == 1


def test_foreign_handlers_survive_shutdown() -> None:
    """TC-05: Handlers installed by the host application are left alone."""
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"))
        shutdown_logging()

        assert foreign in root.handlers
        assert _our_handlers(root) == []
        assert not hasattr(root, _CONFIGURED_FLAG_ATTR)
    finally:
        root.removeHandler(foreign)


def test_unwritable_log_file_degrades(tmp_path: Path, capsys) -> None:
    """TC-06: An unusable log file is reported and console logging continues."""
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    configure_logging(LoggingConfig(level="INFO", log_file=str(blocker / "x.log")))

    assert "Cannot open log file" in capsys.readouterr().err
    assert len(_our_handlers(logging.getLogger())) == 1


def test_default_log_path() -> None:
    """TC-07: The default log lives under the user data directory."""
    path = Path(get_default_log_path())
    assert path.name == "selfupdate.log"
    assert path.parent.name == "logs"


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("verbose", logging.INFO), ("", logging.INFO)],
)
def test_level_value(name: str, expected: int) -> None:
    """TC-08: Level names are case-insensitive; unknown names mean INFO."""
    assert LoggingConfig(level=name).level_value == expected


def test_cli_logging_config() -> None:
    """TC-09: The CLI preset keeps console output and adds the optional file."""
    cfg = LoggingConfig.for_cli(debug=True, log_file="/tmp/selfupdate.log")
    assert cfg.level_value == logging.DEBUG
    assert cfg.console is True
    assert cfg.log_file == "/tmp/selfupdate.log"
    assert LoggingConfig.for_cli().level_value == logging.INFO
