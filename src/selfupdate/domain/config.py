from __future__ import annotations

"""
Update Configuration Domain.

Defines the immutable configuration supplied once per update attempt and the
helpers that build it from a JSON file merged with command-line overrides.
All validation happens at construction, never at use.
"""

import json
import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from selfupdate.core.platform import (
    FORMAT_AUTO,
    SUPPORTED_FORMATS,
    host_platform,
    make_platform,
)
from selfupdate.domain.errors import ConfigError
from selfupdate.domain.models import Platform

if TYPE_CHECKING:
    from selfupdate.infra.network import Fetcher

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_KEYS: Tuple[str, ...] = (
    "cmd_name",
    "archive_format",
    "bin_url",
    "version",
    "install_dir",
    "extra_files",
    "staging_root",
    "os",
    "arch",
)


# -----------------------------------------------------------------------------
# Configuration Model
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class UpdateConfig:
    """
    Immutable description of one update attempt.

    Attributes:
        cmd_name: Command name; names the executable and the URL path segment.
        bin_url: Base URL of the artifact store.
        version: Target version identifier.
        archive_format: 'auto', 'zip' or 'tar.gz'.
        install_dir: Directory holding the installed executable, if known.
        extra_files: Auxiliary paths, relative to the executable's directory.
        fetcher: Fetch capability; the Updater builds an HTTP one when absent.
        on_success: Callback invoked after every replacement succeeded.
        platform: Target platform; defaults to the host.
        staging_root: Parent directory for staging directories.
    """
    cmd_name: str
    bin_url: str
    version: str
    archive_format: str = FORMAT_AUTO
    install_dir: Optional[str] = None
    extra_files: Tuple[str, ...] = ()
    fetcher: Optional[Fetcher] = field(default=None, compare=False)
    on_success: Optional[Callable[[], None]] = field(default=None, compare=False)
    platform: Optional[Platform] = None
    staging_root: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("cmd_name", "bin_url", "version"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Missing required configuration value: {name}")

        fmt = self.archive_format or FORMAT_AUTO
        if fmt != FORMAT_AUTO and fmt not in SUPPORTED_FORMATS:
            raise ConfigError(
                f"Unsupported archive format '{self.archive_format}'; "
                f"expected one of: {FORMAT_AUTO}, {', '.join(SUPPORTED_FORMATS)}"
            )
        object.__setattr__(self, "archive_format", fmt)

        if isinstance(self.extra_files, str):
            raise ConfigError("extra_files must be a sequence of paths, not a string")
        extras = tuple(_check_extra_file(p) for p in self.extra_files)
        _check_distinct_extras(extras, self.cmd_name.strip())
        object.__setattr__(self, "extra_files", extras)

        if self.on_success is not None and not callable(self.on_success):
            raise ConfigError("on_success must be callable")

    @property
    def target_platform(self) -> Platform:
        """The configured platform, or the host platform."""
        return self.platform or host_platform()


# -----------------------------------------------------------------------------
# Construction Helpers
# -----------------------------------------------------------------------------
def config_from_mapping(
        data: Dict[str, Any],
        *,
        fetcher: Optional[Fetcher] = None,
        on_success: Optional[Callable[[], None]] = None,
) -> UpdateConfig:
    """
    Build an UpdateConfig from a plain dictionary (JSON file or CLI overrides).

    Unknown keys are ignored with a warning. 'os' and 'arch' must be given
    together to pin the target platform.

    Args:
        data: Raw configuration values.
        fetcher: Optional fetch capability.
        on_success: Optional completion callback.

    Returns:
        UpdateConfig: The validated configuration.

    Raises:
        ConfigError: If a value is missing or invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config type: expected dict, received {type(data).__name__}.")

    unknown = sorted(set(data) - set(CONFIG_KEYS))
    for key in unknown:
        logger.warning(f"Ignoring unknown configuration key: {key}")

    plat: Optional[Platform] = None
    os_name, arch = data.get("os"), data.get("arch")
    if os_name or arch:
        if not (os_name and arch):
            raise ConfigError("'os' and 'arch' must be configured together")
        plat = make_platform(str(os_name), str(arch))

    extras = data.get("extra_files") or ()
    if isinstance(extras, str):
        extras = _split_csv(extras)

    return UpdateConfig(
        cmd_name=_as_str(data.get("cmd_name")),
        bin_url=_as_str(data.get("bin_url")),
        version=_as_str(data.get("version")),
        archive_format=_as_str(data.get("archive_format")) or FORMAT_AUTO,
        install_dir=data.get("install_dir") or None,
        extra_files=tuple(str(p) for p in extras),
        fetcher=fetcher,
        on_success=on_success,
        platform=plat,
        staging_root=data.get("staging_root") or None,
    )


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load raw configuration values from a JSON file.

    Args:
        path: Path to the JSON document.

    Returns:
        Dict[str, Any]: The decoded object.

    Raises:
        ConfigError: If the file is unreadable or not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot load configuration file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file '{path}' must contain a JSON object")

    logger.debug(f"Loaded configuration from {path}")
    return data


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge non-None overrides for known keys into the base values.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in CONFIG_KEYS:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


# -----------------------------------------------------------------------------
# Private Helpers
# -----------------------------------------------------------------------------
def _check_extra_file(path: str) -> str:
    """Reject extra files that are absolute or climb out of the install dir."""
    if not isinstance(path, str) or not path.strip():
        raise ConfigError("Extra file paths must be non-empty strings")

    unified = path.replace("\\", "/")
    if posixpath.isabs(unified) or os.path.isabs(path) or os.path.splitdrive(path)[0]:
        raise ConfigError(f"Extra file must be a relative path: {path}")
    if ".." in unified.split("/"):
        raise ConfigError(f"Extra file must not contain '..' segments: {path}")
    return path


def _check_distinct_extras(extras: Tuple[str, ...], cmd_name: str) -> None:
    """Reject extra files naming the executable or repeating another entry."""
    reserved = {cmd_name, f"{cmd_name}.exe"}
    seen = set()
    for path in extras:
        key = posixpath.normpath(path.replace("\\", "/"))
        if key in reserved:
            raise ConfigError(f"Extra file must not be the executable itself: {path}")
        if key in seen:
            raise ConfigError(f"Duplicate extra file: {path}")
        seen.add(key)


def _as_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _split_csv(value: str) -> Tuple[str, ...]:
    parts = [x.strip() for x in value.split(",")]
    return tuple(x for x in parts if x)
