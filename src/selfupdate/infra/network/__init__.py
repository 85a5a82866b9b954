from __future__ import annotations

"""
Network Communication Infrastructure.

Exposes the fetch capability protocol and its default HTTP implementation.
"""

from selfupdate.infra.network.common import CHUNK_SIZE, DEFAULT_TIMEOUT, USER_AGENT
from selfupdate.infra.network.fetcher import Fetcher, HttpFetcher

__all__ = [
    "CHUNK_SIZE",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "Fetcher",
    "HttpFetcher",
]
