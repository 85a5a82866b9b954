from __future__ import annotations

"""
Update Error Taxonomy.

Every failure raised by the update pipeline derives from UpdateError, so
callers may catch the whole family or a single stage. Each stage owns exactly
one error class; the CLI layer maps them onto exit codes.
"""

from typing import List, Optional


class UpdateError(RuntimeError):
    """Base class for every failure raised by the update pipeline."""

    kind: str = "update"


class ConfigError(UpdateError):
    """Raised when an update configuration is incomplete or inconsistent."""

    kind = "config"


class UnsupportedPlatformError(UpdateError):
    """Raised when an (OS, architecture) pair has no artifact naming."""

    kind = "platform"


class DownloadError(UpdateError):
    """Raised when the artifact URL cannot be built or the fetch fails."""

    kind = "download"


class ExtractError(UpdateError):
    """Raised for malformed containers, unsupported formats or unsafe entries."""

    kind = "extract"


class ValidationError(UpdateError):
    """Raised when the staged tree lacks the executable or an extra file."""

    kind = "validation"


class ReplaceError(UpdateError):
    """
    Raised when the replacement plan could not be committed.

    When a rollback was attempted, every failure met while restoring
    destinations is kept in ``rollback_errors``. A non-empty list means the
    installation is in an unknown state.

    Attributes:
        path: Destination path whose backup or swap failed.
        rollback_errors: Failures met while restoring backups.
    """

    kind = "replace"

    def __init__(
            self,
            message: str,
            *,
            path: Optional[str] = None,
            rollback_errors: Optional[List[BaseException]] = None,
    ) -> None:
        self.path = path
        self.rollback_errors: List[BaseException] = list(rollback_errors or [])
        if self.rollback_errors:
            details = "; ".join(str(e) for e in self.rollback_errors)
            message = f"{message} (rollback failed: {details})"
        super().__init__(message)

    @property
    def rollback_failed(self) -> bool:
        """Whether restoring the pre-update state failed for any destination."""
        return bool(self.rollback_errors)
