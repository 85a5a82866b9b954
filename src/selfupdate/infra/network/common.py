from __future__ import annotations

USER_AGENT = "selfupdate-client/1.0.0"
DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192
