from __future__ import annotations

"""
Update Orchestrator.

Runs one update attempt end to end: download, extract into a private staging
directory, validate the staged tree, commit the replacement plan and notify.
Each stage must succeed before the next starts; the first failure propagates
unchanged once the staging directory has been removed.
"""

import logging
import os
import sys
import tempfile
from typing import Optional

from selfupdate.core import archive, downloader, replacer, validator
from selfupdate.core.platform import executable_name, resolve_archive_format
from selfupdate.domain.config import UpdateConfig
from selfupdate.domain.errors import ConfigError, UpdateError
from selfupdate.domain.models import UpdateReport
from selfupdate.infra import fs
from selfupdate.infra.network import Fetcher, HttpFetcher

logger = logging.getLogger(__name__)

STAGING_PREFIX = "selfupdate-"


class Updater:
    """
    Replace a running executable with the configured version.

    Attempts against the same target must be serialised by the caller; the
    backup and restore sequences of two concurrent attempts would interleave.
    """

    def __init__(
            self,
            config: UpdateConfig,
            *,
            limits: Optional[archive.ExtractionLimits] = None,
    ) -> None:
        """
        Args:
            config: Immutable configuration of the attempt.
            limits: Extraction limits; defaults to archive.ExtractionLimits().
        """
        self._config = config
        self._fetcher: Fetcher = config.fetcher if config.fetcher is not None else HttpFetcher()
        self._limits = limits

    @property
    def config(self) -> UpdateConfig:
        return self._config

    def resolve_target(self, target_executable: Optional[str] = None) -> str:
        """
        Determine which executable the attempt replaces.

        Resolution order: explicit argument, install_dir joined with the
        executable name, then the frozen interpreter's own executable.

        Raises:
            ConfigError: If none of the above is available.
        """
        if target_executable:
            return os.path.abspath(target_executable)

        cfg = self._config
        if cfg.install_dir:
            return os.path.abspath(
                os.path.join(cfg.install_dir, executable_name(cfg.cmd_name, cfg.target_platform))
            )
        if getattr(sys, "frozen", False):
            return os.path.abspath(sys.executable)

        raise ConfigError("No target executable: pass a path or configure install_dir")

    def attempt_update(self, target_executable: Optional[str] = None) -> UpdateReport:
        """
        Download, stage, validate and install the configured version.

        Args:
            target_executable: Executable to replace; see resolve_target().

        Returns:
            UpdateReport: Summary of the committed update.

        Raises:
            DownloadError: The archive could not be fetched.
            ExtractError: The archive is malformed or holds an unsafe entry.
            ValidationError: The staged tree lacks an expected file.
            ReplaceError: Backups or swaps failed; see rollback_errors.
        """
        cfg = self._config
        plat = cfg.target_platform
        target = self.resolve_target(target_executable)
        exe_name = executable_name(cfg.cmd_name, plat)

        logger.info(f"Updating {target} to {cfg.cmd_name} {cfg.version} ({plat.triple})")

        url = downloader.build_download_url(cfg, plat)
        data = downloader.download_archive(url, self._fetcher)

        try:
            staging_dir = tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=cfg.staging_root)
        except OSError as e:
            raise UpdateError(f"failed to create staging directory: {e}") from e

        try:
            archive.extract_archive(
                data,
                resolve_archive_format(cfg.archive_format, plat),
                staging_dir,
                self._limits,
            )
            unpacked_root = validator.validate_staged_tree(
                staging_dir, plat, cfg.cmd_name, cfg.extra_files
            )
            plan = replacer.build_replacement_plan(
                unpacked_root, target, exe_name, cfg.extra_files
            )
            committed = replacer.execute_plan(plan)
        except UpdateError as e:
            logger.debug(f"Update attempt aborted: {e}")
            raise
        finally:
            fs.remove_tree(staging_dir)
            logger.debug(f"Removed staging directory {staging_dir}")

        logger.info(f"Update to {cfg.version} installed at {target}")

        if cfg.on_success is not None:
            cfg.on_success()

        return UpdateReport(
            target=target,
            version=cfg.version,
            platform=plat.triple,
            url=url,
            replaced=[r.destination for r in committed],
        )
