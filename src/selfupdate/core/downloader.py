from __future__ import annotations

"""
Artifact Downloader.

Builds the versioned, platform-specific artifact URL and retrieves the
archive bytes through the configured fetch capability.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus, urlsplit

from selfupdate.core.platform import archive_name, resolve_archive_format
from selfupdate.domain.config import UpdateConfig
from selfupdate.domain.errors import DownloadError, UpdateError
from selfupdate.domain.models import Platform
from selfupdate.infra.network import Fetcher

logger = logging.getLogger(__name__)


def build_download_url(config: UpdateConfig, plat: Optional[Platform] = None) -> str:
    """
    Build '{bin_url}/{cmd_name}/{version}/{os}-{arch}.{format}'.

    The version is form-encoded so that separators or spaces in it cannot
    alter the path structure.

    Args:
        config: Update configuration.
        plat: Target platform; defaults to the configured one.

    Returns:
        str: The artifact URL.

    Raises:
        DownloadError: If the base URL is not an absolute URL.
    """
    plat = plat or config.target_platform
    parts = urlsplit(config.bin_url.strip())
    if not parts.scheme or not parts.netloc:
        raise DownloadError(f"failed to construct download URL: invalid base URL '{config.bin_url}'")

    fmt = resolve_archive_format(config.archive_format, plat)
    segments = [
        config.bin_url.strip().rstrip("/"),
        config.cmd_name.strip("/"),
        quote_plus(config.version, safe=""),
        archive_name(plat, fmt),
    ]
    return "/".join(segments)


def download_archive(url: str, fetcher: Fetcher) -> bytes:
    """
    Fetch the artifact archive and return its raw bytes.

    Args:
        url: Artifact URL, as built by build_download_url().
        fetcher: Transport used to retrieve the URL.

    Returns:
        bytes: Archive content.

    Raises:
        DownloadError: If the fetch or the read fails. The transport's
            exception is chained as the cause.
    """
    logger.info(f"Downloading update archive from {url}")

    try:
        stream = fetcher.fetch(url)
    except UpdateError:
        raise
    except Exception as e:
        raise DownloadError(f"failed to download archive from {url}: {e}") from e

    if stream is None:
        raise DownloadError(f"failed to download archive from {url}: empty response")

    try:
        data = stream.read()
    except Exception as e:
        raise DownloadError(f"failed to read archive data from {url}: {e}") from e
    finally:
        close = getattr(stream, "close", None)
        if callable(close):
            close()

    logger.debug(f"Downloaded {len(data)} bytes")
    return data
