from __future__ import annotations

"""
Staged Tree Validator.

Confirms that an extracted archive holds the command's executable and every
configured extra file under the platform's top-level directory.
"""

import logging
import os
from typing import Sequence

from selfupdate.core.platform import executable_name, unpacked_dir_name
from selfupdate.domain.errors import ValidationError
from selfupdate.domain.models import Platform

logger = logging.getLogger(__name__)


def validate_staged_tree(
        staging_dir: str,
        plat: Platform,
        cmd_name: str,
        extra_files: Sequence[str] = (),
) -> str:
    """
    Check the staged tree without modifying it.

    Args:
        staging_dir: Directory the archive was extracted into.
        plat: Target platform; names the top-level directory and the executable.
        cmd_name: Command name.
        extra_files: Auxiliary paths relative to the top-level directory.

    Returns:
        str: Path of the unpacked top-level directory.

    Raises:
        ValidationError: Naming the first missing executable or extra file.
    """
    root = os.path.join(staging_dir, unpacked_dir_name(plat))
    exe_name = executable_name(cmd_name, plat)

    if not os.path.isfile(os.path.join(root, exe_name)):
        raise ValidationError(f"executable not found: {exe_name}")

    for extra in extra_files:
        if not os.path.isfile(os.path.join(root, extra)):
            raise ValidationError(f"required file not found: {extra}")

    logger.debug(f"Staged tree {root} contains {exe_name} and {len(extra_files)} extra file(s)")
    return root
