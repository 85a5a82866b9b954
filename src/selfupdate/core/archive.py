from __future__ import annotations

"""
Archive Extractor.

Decodes zip and tar.gz containers into a staging directory. Every entry is
checked against the staging root before anything is written; an entry that
would land outside of it aborts the whole extraction.
"""

import io
import logging
import os
import shutil
import tarfile
import zipfile
import zlib
from dataclasses import dataclass
from typing import IO, Optional

from selfupdate.core.platform import FORMAT_TAR_GZ, FORMAT_ZIP
from selfupdate.domain.errors import ExtractError

logger = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


@dataclass(frozen=True)
class ExtractionLimits:
    """Upper bounds applied while expanding an archive."""
    max_entries: int = 10_000
    max_total_bytes: int = 1024 * 1024 * 1024


class _Budget:
    """Running totals checked against ExtractionLimits."""

    def __init__(self, limits: ExtractionLimits) -> None:
        self._limits = limits
        self.entries = 0
        self.total_bytes = 0

    def add_entry(self) -> None:
        self.entries += 1
        if self.entries > self._limits.max_entries:
            raise ExtractError(
                f"archive contains more than {self._limits.max_entries} entries"
            )

    def add_bytes(self, name: str, size: int) -> None:
        self.total_bytes += size
        if self.total_bytes > self._limits.max_total_bytes:
            raise ExtractError(
                f"archive expands beyond {self._limits.max_total_bytes} bytes at {name}"
            )


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def extract_archive(
        data: bytes,
        archive_format: str,
        dest_dir: str,
        limits: Optional[ExtractionLimits] = None,
) -> None:
    """
    Populate dest_dir with every entry of the archive.

    Directory structure and permission bits are preserved. Partially written
    content is left behind on failure; the caller owns dest_dir and discards
    it wholesale.

    Args:
        data: Raw archive bytes.
        archive_format: 'zip' or 'tar.gz'.
        dest_dir: Existing staging directory.
        limits: Size limits; defaults to ExtractionLimits().

    Raises:
        ExtractError: For an unsupported format, a malformed container, an
            entry escaping dest_dir, exceeded limits or any I/O failure.
    """
    budget = _Budget(limits or ExtractionLimits())
    logger.info(f"Extracting {archive_format} archive ({len(data)} bytes) into {dest_dir}")

    if archive_format == FORMAT_ZIP:
        _extract_zip(data, dest_dir, budget)
    elif archive_format == FORMAT_TAR_GZ:
        _extract_tar_gz(data, dest_dir, budget)
    else:
        raise ExtractError(f"unsupported archive format: {archive_format}")

    logger.debug(f"Extracted {budget.entries} entries totalling {budget.total_bytes} bytes")


def safe_join(dest_dir: str, name: str) -> str:
    """
    Resolve an entry name under dest_dir, rejecting anything outside it.

    Args:
        dest_dir: Extraction root.
        name: Entry name as stored in the archive.

    Returns:
        str: Normalised absolute-or-relative destination path.

    Raises:
        ExtractError: If the entry is absolute or climbs out of dest_dir.
    """
    root = os.path.normpath(dest_dir)
    path = os.path.normpath(os.path.join(root, name))
    if not path.startswith(root + os.sep):
        raise ExtractError(f"invalid file path: {name}")
    return path


# -----------------------------------------------------------------------------
# ZIP
# -----------------------------------------------------------------------------

def _extract_zip(data: bytes, dest_dir: str, budget: _Budget) -> None:
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
        raise ExtractError(f"malformed zip archive: {e}") from e

    with archive:
        for info in archive.infolist():
            budget.add_entry()
            path = safe_join(dest_dir, info.filename)
            mode = (info.external_attr >> 16) & 0o777

            try:
                if info.is_dir():
                    os.makedirs(path, mode or DEFAULT_DIR_MODE, exist_ok=True)
                    continue

                budget.add_bytes(info.filename, info.file_size)
                with archive.open(info) as source:
                    _write_entry(source, path, mode or DEFAULT_FILE_MODE)
            except (OSError, zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise ExtractError(f"failed to extract {info.filename}: {e}") from e


# -----------------------------------------------------------------------------
# TAR.GZ
# -----------------------------------------------------------------------------

def _extract_tar_gz(data: bytes, dest_dir: str, budget: _Budget) -> None:
    try:
        archive = tarfile.open(fileobj=io.BytesIO(data), mode="r:gz")
    except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
        raise ExtractError(f"malformed tar.gz archive: {e}") from e

    with archive:
        while True:
            try:
                member = archive.next()
            except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
                raise ExtractError(f"malformed tar.gz archive: {e}") from e
            if member is None:
                break

            budget.add_entry()
            path = safe_join(dest_dir, member.name)
            mode = member.mode & 0o777

            try:
                if member.isdir():
                    os.makedirs(path, mode or DEFAULT_DIR_MODE, exist_ok=True)
                elif member.isfile():
                    budget.add_bytes(member.name, member.size)
                    source = archive.extractfile(member)
                    if source is None:
                        raise ExtractError(f"failed to extract {member.name}: no content")
                    with source:
                        _write_entry(source, path, mode or DEFAULT_FILE_MODE)
                else:
                    logger.debug(f"Skipping non-regular archive entry {member.name}")
            except (OSError, tarfile.TarError, EOFError, zlib.error) as e:
                raise ExtractError(f"failed to extract {member.name}: {e}") from e


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _write_entry(source: IO[bytes], path: str, mode: int) -> None:
    """Create or truncate path with mode and copy source into it."""
    os.makedirs(os.path.dirname(path), DEFAULT_DIR_MODE, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as target:
        shutil.copyfileobj(source, target)
    # os.open honours the umask; the archive's mode is authoritative
    os.chmod(path, mode)
