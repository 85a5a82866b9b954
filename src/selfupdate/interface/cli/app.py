from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of the JSON
configuration file with command-line overrides, one update attempt and
rendering of its result. Library errors are turned into exit codes here and
nowhere else.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from selfupdate.core.platform import (
    archive_name,
    get_shared_library_config,
    host_platform,
    make_platform,
    resolve_archive_format,
)
from selfupdate.core.updater import Updater
from selfupdate.domain.config import config_from_mapping, load_config_file, merge_config
from selfupdate.domain.errors import ConfigError, UpdateError
from selfupdate.domain.models import (
    Platform,
    UpdateResult,
    create_error_result,
    create_success_result,
)
from selfupdate.infra.logging import LoggingConfig, configure_logging, get_logger
from selfupdate.infra.network import HttpFetcher
from selfupdate.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 update failure, 2 bad configuration).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig.for_cli(debug=args.debug, log_file=args.log_file))

    overrides = cli_args.args_to_overrides(args)

    # 1. Resolve configuration hierarchy (file, then flags)
    try:
        base_conf: Dict[str, Any] = load_config_file(args.config_file) if args.config_file else {}
        raw_conf = merge_config(base_conf, overrides)

        # 2. Standalone queries
        if args.shared_lib:
            return _print_shared_library(args.shared_lib, raw_conf)
        if args.print_platform:
            return _print_platform(raw_conf)

        config = config_from_mapping(raw_conf, fetcher=HttpFetcher(timeout=args.timeout))
    except UpdateError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG

    # 3. Update attempt
    updater = Updater(config)
    try:
        target = updater.resolve_target(args.target)
    except UpdateError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        report = updater.attempt_update(target)
        result = create_success_result(report)
    except KeyboardInterrupt:
        logger.warning("Update interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except UpdateError as e:
        if getattr(e, "rollback_failed", False):
            logger.critical(f"Rollback failed, installation state is unknown: {e}")
        else:
            logger.error(f"Update failed: {e}")
        result = create_error_result(e, target=target, version=config.version)

    # 4. Output rendering
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# QUERIES
# -----------------------------------------------------------------------------

def _resolve_platform(conf: Dict[str, Any]) -> Platform:
    os_name, arch = conf.get("os"), conf.get("arch")
    if os_name or arch:
        if not (os_name and arch):
            raise ConfigError("'os' and 'arch' must be configured together")
        return make_platform(str(os_name), str(arch))
    return host_platform()


def _print_platform(conf: Dict[str, Any]) -> int:
    plat = _resolve_platform(conf)
    fmt = resolve_archive_format(conf.get("archive_format"), plat)
    print(plat.triple)
    print(archive_name(plat, fmt))
    return EXIT_OK


def _print_shared_library(name: str, conf: Dict[str, Any]) -> int:
    lib = get_shared_library_config(name, _resolve_platform(conf))
    print(f"{lib.file_name} {lib.archive_format}")
    return EXIT_OK

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: UpdateResult) -> None:
    """Render the attempt outcome for terminal users."""
    if result.ok:
        print(f"Updated {result.target} to version {result.version}")
        for path in result.replaced:
            print(f"  replaced: {path}")
        return

    print(f"Update failed ({result.error_kind}): {result.error}", file=sys.stderr)
    if result.rollback_failed:
        print(
            "WARNING: the previous installation could not be fully restored; "
            "check the files listed above.",
            file=sys.stderr,
        )
