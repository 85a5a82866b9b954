from __future__ import annotations

"""
Test helpers: in-memory release archives and a fake fetch capability.
"""

import io
import tarfile
import zipfile
from typing import BinaryIO, List, Optional, Sequence, Tuple, Union

from selfupdate.domain.models import Platform

# (name, content, mode); content None means a directory entry
ArchiveEntry = Tuple[str, Optional[bytes], int]

LINUX_AMD64 = Platform("linux", "amd64")
WINDOWS_AMD64 = Platform("windows", "amd64")


def build_tar_gz(entries: Sequence[ArchiveEntry]) -> bytes:
    """Pack entries into a gzip-compressed tar held in memory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content, mode in entries:
            info = tarfile.TarInfo(name)
            info.mode = mode
            if content is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def build_zip(entries: Sequence[ArchiveEntry]) -> bytes:
    """Pack entries into a zip held in memory, recording Unix modes."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content, mode in entries:
            if content is None:
                info = zipfile.ZipInfo(name.rstrip("/") + "/")
                info.external_attr = ((0o040000 | mode) << 16) | 0x10
                zf.writestr(info, b"")
            else:
                info = zipfile.ZipInfo(name)
                info.external_attr = (0o100000 | mode) << 16
                zf.writestr(info, content)
    return buf.getvalue()


def release_entries(
        cmd_name: str = "myapp",
        content: bytes = b"new binary",
        mode: int = 0o750,
        triple: str = "linux-amd64",
        extras: Optional[dict] = None,
) -> List[ArchiveEntry]:
    """Entries of a well-formed release: '<triple>/<cmd_name>' plus extras."""
    entries: List[ArchiveEntry] = [
        (triple, None, 0o755),
        (f"{triple}/{cmd_name}", content, mode),
    ]
    for rel_path, data in (extras or {}).items():
        entries.append((f"{triple}/{rel_path}", data, 0o644))
    return entries


class FakeFetcher:
    """Fetch capability returning canned bytes, or raising a canned error."""

    def __init__(self, payload: Union[bytes, BaseException]) -> None:
        self.payload = payload
        self.urls: List[str] = []

    def fetch(self, url: str) -> BinaryIO:
        self.urls.append(url)
        if isinstance(self.payload, BaseException):
            raise self.payload
        return io.BytesIO(self.payload)
