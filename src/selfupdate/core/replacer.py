from __future__ import annotations

"""
Backup/Rollback Engine.

Commits a replacement plan as a best-effort unit over a filesystem without
multi-file transactions:

1. Every pre-existing destination is copied to '<destination>.backup' before
   any destination is touched.
2. Records are swapped in plan order; each swap goes through a sibling
   temporary file renamed over the destination.
3. If a swap fails, every backup is moved back over its destination and
   destinations created by the attempt are removed. Restoration failures are
   attached to the raised ReplaceError.
4. On success the backups are deleted.
"""

import logging
import os
from typing import List, Sequence

from selfupdate.domain.errors import ReplaceError
from selfupdate.domain.models import ReplacementPlan, ReplacementRecord
from selfupdate.infra import fs

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"

# -----------------------------------------------------------------------------
# PLAN CONSTRUCTION
# -----------------------------------------------------------------------------

def build_replacement_plan(
        unpacked_root: str,
        target_executable: str,
        exe_name: str,
        extra_files: Sequence[str] = (),
) -> ReplacementPlan:
    """
    Describe every swap of an update: the executable first, then extra files.

    Destinations are resolved through symlinks, so the files the links point
    at are backed up and replaced while the links themselves stay in place.
    Extra files live next to the resolved executable. A destination reached
    twice is only swapped once.

    Args:
        unpacked_root: Validated top-level directory of the staged tree.
        target_executable: Live executable to replace.
        exe_name: Executable name inside unpacked_root.
        extra_files: Auxiliary paths, relative to both roots.

    Returns:
        ReplacementPlan: Ordered records without backups.
    """
    target = os.path.realpath(target_executable)
    install_dir = os.path.dirname(target)

    records = [ReplacementRecord(os.path.join(unpacked_root, exe_name), target)]
    seen = {os.path.normcase(target)}
    for extra in extra_files:
        destination = os.path.realpath(os.path.join(install_dir, extra))
        key = os.path.normcase(destination)
        if key in seen:
            logger.warning(f"Skipping {extra}: {destination} is already part of the update")
            continue
        seen.add(key)
        records.append(ReplacementRecord(os.path.join(unpacked_root, extra), destination))
    return tuple(records)


# -----------------------------------------------------------------------------
# PLAN EXECUTION
# -----------------------------------------------------------------------------

def execute_plan(plan: ReplacementPlan) -> ReplacementPlan:
    """
    Commit every record of the plan or restore the pre-update state.

    Args:
        plan: Ordered replacement records.

    Returns:
        ReplacementPlan: The committed records, with the backups that were
            taken (and since removed).

    Raises:
        ReplaceError: If a backup or a swap failed. rollback_errors lists any
            destination that could not be restored.
    """
    backed_up = _create_backups(plan)

    completed: List[ReplacementRecord] = []
    for record in backed_up:
        try:
            fs.replace_file(record.source, record.destination)
        except OSError as e:
            logger.error(f"Replacing {record.destination} failed, rolling back")
            rollback_errors = rollback(backed_up, completed)
            raise ReplaceError(
                f"failed to replace {record.destination}: {e}",
                path=record.destination,
                rollback_errors=rollback_errors,
            ) from e
        completed.append(record)
        logger.info(f"Replaced {record.destination}")

    _remove_backups(backed_up)
    return backed_up


def rollback(
        plan: Sequence[ReplacementRecord],
        completed: Sequence[ReplacementRecord] = (),
) -> List[BaseException]:
    """
    Restore every destination of the plan that has a backup.

    Destinations without a backup that appear in ``completed`` did not exist
    before the attempt and are removed.

    Args:
        plan: Records, carrying the backups actually taken.
        completed: Records whose swap already succeeded.

    Returns:
        List[BaseException]: Restoration failures, empty if all succeeded.
    """
    errors: List[BaseException] = []

    for record in plan:
        if record.backup is None:
            continue
        try:
            os.replace(record.backup, record.destination)
            logger.info(f"Restored {record.destination} from backup")
        except OSError as e:
            errors.append(
                ReplaceError(f"cannot restore {record.destination} from {record.backup}: {e}",
                             path=record.destination)
            )

    for record in completed:
        if record.backup is not None:
            continue
        try:
            os.remove(record.destination)
            logger.info(f"Removed {record.destination} created by the failed update")
        except FileNotFoundError:
            pass
        except OSError as e:
            errors.append(
                ReplaceError(f"cannot remove {record.destination}: {e}", path=record.destination)
            )

    return errors


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _create_backups(plan: ReplacementPlan) -> ReplacementPlan:
    """Copy every existing destination aside; undo the copies if one fails."""
    records: List[ReplacementRecord] = []

    for record in plan:
        if not os.path.lexists(record.destination):
            records.append(record)
            continue

        backup = record.destination + BACKUP_SUFFIX
        try:
            fs.copy_file(record.destination, backup)
        except OSError as e:
            # Nothing was overwritten yet: dropping the copies is enough.
            _remove_backups(records)
            _discard_partial(backup)
            raise ReplaceError(
                f"failed to create backup for {record.destination}: {e}",
                path=record.destination,
            ) from e
        records.append(record.with_backup(backup))
        logger.debug(f"Backed up {record.destination} to {backup}")

    return tuple(records)


def _remove_backups(records: Sequence[ReplacementRecord]) -> None:
    for record in records:
        if record.backup is None:
            continue
        try:
            os.remove(record.backup)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Backup could not be removed: {record.backup} ({e})")


def _discard_partial(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass
