from __future__ import annotations

"""
Platform Resolver.

Maps the host (or an explicitly supplied) operating system and architecture
onto the artifact naming scheme: platform triple, archive format, archive
file name, unpacked directory name and executable name. Every mapping is an
explicit table; combinations outside it fail with UnsupportedPlatformError.
"""

import platform as _platform
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from selfupdate.domain.errors import UnsupportedPlatformError
from selfupdate.domain.models import Platform

# -----------------------------------------------------------------------------
# CONSTANTS
# -----------------------------------------------------------------------------

FORMAT_AUTO = "auto"
FORMAT_ZIP = "zip"
FORMAT_TAR_GZ = "tar.gz"
SUPPORTED_FORMATS: Tuple[str, ...] = (FORMAT_ZIP, FORMAT_TAR_GZ)

WINDOWS_EXECUTABLE_SUFFIX = ".exe"

# platform.system() -> os identifier
_OS_ALIASES: Dict[str, str] = {
    "windows": "windows",
    "darwin": "darwin",
    "linux": "linux",
}

# platform.machine() -> arch identifier
_ARCH_ALIASES: Dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv8l": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
}

SUPPORTED_ARCHITECTURES: Dict[str, Tuple[str, ...]] = {
    "windows": ("amd64", "arm64", "386"),
    "darwin": ("amd64", "arm64"),
    "linux": ("amd64", "arm64", "386", "arm"),
}

# (os, arch) -> (file name template, archive format)
_SHARED_LIBRARY_TABLE: Dict[Tuple[str, str], Tuple[str, str]] = {
    ("windows", "amd64"): ("{name}amd64.dll", FORMAT_ZIP),
    ("darwin", "arm64"): ("darwin{name}arm64.dylib", FORMAT_TAR_GZ),
    ("darwin", "amd64"): ("darwin{name}amd64.dylib", FORMAT_TAR_GZ),
    ("linux", "amd64"): ("lib{name}.so", FORMAT_TAR_GZ),
    ("linux", "arm64"): ("lib{name}.so", FORMAT_TAR_GZ),
    ("linux", "386"): ("lib{name}.so", FORMAT_TAR_GZ),
    ("linux", "arm"): ("lib{name}.so", FORMAT_TAR_GZ),
}


@dataclass(frozen=True)
class SharedLibraryConfig:
    """Artifact file name and archive format of a platform's shared library."""
    file_name: str
    archive_format: str


# -----------------------------------------------------------------------------
# PLATFORM RESOLUTION API
# -----------------------------------------------------------------------------

def make_platform(os_name: str, arch: str) -> Platform:
    """
    Build a Platform from raw identifiers, normalising common aliases.

    Args:
        os_name: Operating system name ('Linux', 'windows', ...).
        arch: Machine architecture ('x86_64', 'arm64', ...).

    Returns:
        Platform: The normalised platform.

    Raises:
        UnsupportedPlatformError: If the pair is outside the supported domain.
    """
    os_key = (os_name or "").strip().lower()
    arch_key = (arch or "").strip().lower()

    norm_os = _OS_ALIASES.get(os_key)
    if norm_os is None:
        raise UnsupportedPlatformError(f"unsupported operating system: {os_name}")

    norm_arch = _ARCH_ALIASES.get(arch_key, arch_key)
    if norm_arch not in SUPPORTED_ARCHITECTURES[norm_os]:
        raise UnsupportedPlatformError(f"unsupported architecture {arch} for {norm_os}")

    return Platform(norm_os, norm_arch)


def host_platform() -> Platform:
    """Resolve the Platform of the running interpreter."""
    return make_platform(_platform.system(), _platform.machine())


def default_archive_format(plat: Platform) -> str:
    """Return 'zip' on Windows and 'tar.gz' everywhere else."""
    return FORMAT_ZIP if plat.is_windows else FORMAT_TAR_GZ


def resolve_archive_format(configured: Optional[str], plat: Platform) -> str:
    """
    Resolve the effective archive format for an attempt.

    Args:
        configured: Format pinned by configuration; empty or 'auto' infers it.
        plat: Target platform.

    Returns:
        str: Either 'zip' or 'tar.gz'.
    """
    if not configured or configured == FORMAT_AUTO:
        return default_archive_format(plat)
    return configured


def archive_name(plat: Platform, archive_format: str) -> str:
    """Artifact file name, e.g. 'linux-amd64.tar.gz'."""
    return f"{plat.triple}.{archive_format}"


def unpacked_dir_name(plat: Platform) -> str:
    """Top-level directory expected inside the archive."""
    return plat.triple


def executable_name(cmd_name: str, plat: Platform) -> str:
    """Name of the command's executable inside the archive and on disk."""
    if plat.is_windows and not cmd_name.lower().endswith(WINDOWS_EXECUTABLE_SUFFIX):
        return cmd_name + WINDOWS_EXECUTABLE_SUFFIX
    return cmd_name


def get_shared_library_config(
        library: str,
        plat: Optional[Platform] = None,
) -> SharedLibraryConfig:
    """
    Resolve the shared library artifact name and archive format for a platform.

    Args:
        library: Library stem, e.g. 'gridnetlib'.
        plat: Target platform; defaults to the host.

    Returns:
        SharedLibraryConfig: File name and archive format.

    Raises:
        UnsupportedPlatformError: If the pair has no entry in the naming table.
    """
    plat = plat or host_platform()
    entry = _SHARED_LIBRARY_TABLE.get((plat.os, plat.arch))
    if entry is None:
        if plat.os in SUPPORTED_ARCHITECTURES:
            raise UnsupportedPlatformError(
                f"unsupported architecture {plat.arch} for {plat.os}"
            )
        raise UnsupportedPlatformError(f"unsupported operating system: {plat.os}")

    template, archive_format = entry
    return SharedLibraryConfig(template.format(name=library), archive_format)
