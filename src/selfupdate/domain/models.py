from __future__ import annotations

"""
Update Domain Data Models.

Defines the value objects exchanged between the pipeline stages: the target
platform, the replacement records that make up a plan, and the result objects
handed back to the interface layer.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# -----------------------------------------------------------------------------
# PLATFORM IDENTITY
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Platform:
    """
    Operating system and architecture pair, in Go-style naming.

    Attributes:
        os: Operating system identifier ('windows', 'darwin', 'linux').
        arch: Architecture identifier ('amd64', 'arm64', '386', 'arm').
    """
    os: str
    arch: str

    @property
    def triple(self) -> str:
        """Artifact naming key, e.g. 'linux-amd64'."""
        return f"{self.os}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def __str__(self) -> str:
        return self.triple


# -----------------------------------------------------------------------------
# REPLACEMENT PLAN
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ReplacementRecord:
    """
    A single file swap inside a replacement plan.

    Attributes:
        source: Staged file holding the new content.
        destination: Live file to be replaced (may not exist yet).
        backup: Copy of the pre-existing destination, set only once taken.
    """
    source: str
    destination: str
    backup: Optional[str] = None

    def with_backup(self, backup: str) -> ReplacementRecord:
        return ReplacementRecord(self.source, self.destination, backup)


# Ordered: main executable first, then each extra file in configuration order.
ReplacementPlan = Tuple[ReplacementRecord, ...]


# -----------------------------------------------------------------------------
# RESULTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class UpdateReport:
    """
    Summary of a committed update attempt.

    Attributes:
        target: Path of the replaced executable.
        version: Version identifier that was installed.
        platform: Platform triple of the installed artifact.
        url: Artifact URL the archive was fetched from.
        replaced: Destinations written, in plan order.
    """
    target: str
    version: str
    platform: str
    url: str
    replaced: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateResult:
    """
    Interface-facing outcome of an update attempt.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        error_kind: Failing stage ('download', 'extract', ...), empty on success.
        rollback_failed: True when a failed rollback left the target in an unknown state.
        target: Executable path the attempt targeted.
        version: Requested version identifier.
        replaced: Destinations written on success.
    """
    ok: bool
    error: str
    error_kind: str = ""
    rollback_failed: bool = False
    target: str = ""
    version: str = ""
    replaced: List[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_success_result(report: UpdateReport) -> UpdateResult:
    """
    Create a successful result from the report of a committed attempt.

    Args:
        report: Summary returned by the orchestrator.

    Returns:
        UpdateResult: An immutable success result object.
    """
    return UpdateResult(
        ok=True,
        error="",
        target=report.target,
        version=report.version,
        replaced=list(report.replaced),
    )


def create_error_result(
        error: BaseException,
        target: str = "",
        version: str = "",
) -> UpdateResult:
    """
    Create a failed result from the exception that aborted the attempt.

    Args:
        error: Exception raised by the pipeline.
        target: Executable path the attempt targeted.
        version: Requested version identifier.

    Returns:
        UpdateResult: An immutable error result object.
    """
    return UpdateResult(
        ok=False,
        error=str(error),
        error_kind=getattr(error, "kind", "internal"),
        rollback_failed=bool(getattr(error, "rollback_failed", False)),
        target=target,
        version=version,
    )
