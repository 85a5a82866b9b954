from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides the low-level file operations used by the update pipeline: verbatim
copies that preserve permission bits, rename-based replacement through a
sibling temporary file, and removal of staging trees. Also resolves the
per-user data directory used for persistent logs.
"""

import logging
import os
import shutil
import stat
import tempfile

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "SelfUpdate"
UNIX_APP_DIR_NAME = ".selfupdate"
CHUNK_SIZE = 64 * 1024

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/SelfUpdate
    - Linux/Mac: ~/.selfupdate

    Returns:
        str: Absolute path to the application data directory.
    """
    path = ""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    return os.path.abspath(path)

# -----------------------------------------------------------------------------
# FILE OPERATIONS API
# -----------------------------------------------------------------------------

def file_mode(path: str) -> int:
    """Return the permission bits of a file."""
    return stat.S_IMODE(os.stat(path).st_mode)


def copy_file(src: str, dst: str) -> None:
    """
    Copy a file verbatim, content and permission bits, truncating dst.

    Args:
        src: Existing source file.
        dst: Destination path; created or truncated.

    Raises:
        OSError: On any read, write or chmod failure.
    """
    with open(src, "rb") as source, open(dst, "wb") as target:
        shutil.copyfileobj(source, target, CHUNK_SIZE)
    os.chmod(dst, file_mode(src))


def replace_file(src: str, dst: str) -> None:
    """
    Replace dst with the content and permission bits of src.

    The new content is written to a temporary file next to dst and renamed
    over it, so dst holds either the old or the new content, never a mix.
    Renaming works on a running executable on POSIX systems.

    Args:
        src: Staged file holding the new content.
        dst: Live file to replace; created if absent.

    Raises:
        OSError: If the source cannot be read or the destination directory
            does not accept the write or the rename.
    """
    dst_dir = os.path.dirname(os.path.abspath(dst))
    mode = file_mode(src)

    fd, tmp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(dst)}.", suffix=".new", dir=dst_dir
    )
    try:
        with os.fdopen(fd, "wb") as target, open(src, "rb") as source:
            shutil.copyfileobj(source, target, CHUNK_SIZE)
            target.flush()
            os.fsync(target.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, dst)
    except BaseException:
        _discard(tmp_path)
        raise


def remove_tree(path: str) -> None:
    """
    Remove a directory tree, including read-only entries extracted from archives.

    Failures are logged rather than raised; the caller is tearing down after
    an attempt has already completed or failed.

    Args:
        path: Directory to remove.
    """
    if not os.path.exists(path):
        return
    try:
        shutil.rmtree(path)
        return
    except OSError:
        logger.debug(f"Retrying removal of {path} after relaxing permissions")

    for root, dirs, _files in os.walk(path):
        for d in dirs:
            try:
                os.chmod(os.path.join(root, d), stat.S_IRWXU)
            except OSError:
                pass
    try:
        os.chmod(path, stat.S_IRWXU)
    except OSError:
        pass
    shutil.rmtree(path, ignore_errors=True)

    if os.path.exists(path):
        logger.warning(f"Staging directory could not be fully removed: {path}")


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Temporary file could not be removed: {path} ({e})")
