from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Validates data directory resolution, permission-preserving copies,
rename-based replacement and removal of read-only staging trees.
"""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from selfupdate.infra.fs import (
    copy_file,
    file_mode,
    get_user_data_dir,
    remove_tree,
    replace_file,
)

# -----------------------------------------------------------------------------
# PATH RESOLUTION TESTS
# -----------------------------------------------------------------------------

def test_get_user_data_dir_windows() -> None:
    """TC-01: %LOCALAPPDATA% is used on Windows systems."""
    with patch("os.name", "nt"):
        with patch.dict(os.environ, {"LOCALAPPDATA": "C:/Users/Test/AppData/Local"}):
            path = get_user_data_dir()
    assert path.endswith("SelfUpdate")
    assert "AppData" in path


def test_get_user_data_dir_posix() -> None:
    """TC-02: A dot directory in the home folder is used elsewhere."""
    with patch("os.name", "posix"):
        path = get_user_data_dir()
    assert os.path.basename(path) == ".selfupdate"

# -----------------------------------------------------------------------------
# FILE OPERATION TESTS
# -----------------------------------------------------------------------------

def test_copy_file_preserves_mode(tmp_path: Path) -> None:
    """TC-03: Copies carry content and permission bits."""
    src = tmp_path / "src"
    src.write_bytes(b"payload")
    os.chmod(src, 0o750)
    dst = tmp_path / "dst"
    dst.write_bytes(b"longer previous content")

    copy_file(str(src), str(dst))

    assert dst.read_bytes() == b"payload"
    assert file_mode(str(dst)) == 0o750


def test_replace_file_swaps_content(tmp_path: Path) -> None:
    """TC-04: Replacement installs new bytes and mode without leftovers."""
    src = tmp_path / "staged"
    src.write_bytes(b"new")
    os.chmod(src, 0o700)
    dst_dir = tmp_path / "install"
    dst_dir.mkdir()
    dst = dst_dir / "app"
    dst.write_bytes(b"old")

    replace_file(str(src), str(dst))

    assert dst.read_bytes() == b"new"
    assert file_mode(str(dst)) == 0o700
    assert os.listdir(dst_dir) == ["app"]


def test_replace_file_missing_directory(tmp_path: Path) -> None:
    """TC-05: Parent directories are not created for the destination."""
    src = tmp_path / "staged"
    src.write_bytes(b"new")

    with pytest.raises(OSError):
        replace_file(str(src), str(tmp_path / "missing" / "app"))
    assert not (tmp_path / "missing").exists()


def test_replace_file_failed_rename_cleans_up(tmp_path: Path) -> None:
    """TC-06: A failed rename leaves the destination and no temp file."""
    src = tmp_path / "staged"
    src.write_bytes(b"new")
    dst_dir = tmp_path / "install"
    dst_dir.mkdir()
    dst = dst_dir / "app"
    dst.write_bytes(b"old")

    with patch("selfupdate.infra.fs.os.replace", side_effect=OSError("busy")):
        with pytest.raises(OSError):
            replace_file(str(src), str(dst))

    assert dst.read_bytes() == b"old"
    assert os.listdir(dst_dir) == ["app"]


def test_remove_tree_read_only_dirs(tmp_path: Path) -> None:
    """TC-07: Trees holding read-only directories are removed completely."""
    root = tmp_path / "staging"
    locked = root / "linux-amd64"
    locked.mkdir(parents=True)
    (locked / "myapp").write_bytes(b"x")
    os.chmod(locked, stat.S_IRUSR | stat.S_IXUSR)

    remove_tree(str(root))

    assert not root.exists()


def test_remove_tree_missing_is_noop(tmp_path: Path) -> None:
    """TC-08: Removing an absent tree does nothing."""
    remove_tree(str(tmp_path / "absent"))
