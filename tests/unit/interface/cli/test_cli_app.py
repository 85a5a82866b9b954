from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Covers exit codes, JSON and human output, configuration file merging and the
platform queries. The HTTP fetch capability is replaced by an in-memory fake.
"""

import json
import os
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from archive_helpers import FakeFetcher, build_tar_gz, release_entries
from selfupdate.interface.cli.app import main

pytestmark = pytest.mark.usefixtures("reset_logging")


def _base_args(tmp_path: Path, target: str) -> List[str]:
    staging = tmp_path / "staging"
    staging.mkdir(exist_ok=True)
    return [
        "--cmd-name", "myapp",
        "--base-url", "https://dl.example.com",
        "--version", "2.0.0",
        "--os", "linux",
        "--arch", "amd64",
        "--target", target,
        "--staging-root", str(staging),
    ]


def _run(argv: List[str], payload) -> int:
    with patch("selfupdate.interface.cli.app.HttpFetcher", return_value=FakeFetcher(payload)):
        return main(argv)


def test_cli_update_success_json(tmp_path: Path, install_dir: str, capsys) -> None:
    """TC-01: A successful update exits 0 and prints a JSON result."""
    target = os.path.join(install_dir, "myapp")
    code = _run(_base_args(tmp_path, target) + ["--json"], build_tar_gz(release_entries()))

    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is True
    assert result["version"] == "2.0.0"
    assert result["replaced"] == [os.path.realpath(target)]
    assert Path(target).read_bytes() == b"new binary"


def test_cli_update_failure_human(tmp_path: Path, install_dir: str, capsys) -> None:
    """TC-02: A failed update exits 1 and names the failing stage."""
    target = os.path.join(install_dir, "myapp")
    code = _run(_base_args(tmp_path, target), b"corrupted")

    assert code == 1
    assert "Update failed (extract)" in capsys.readouterr().err
    assert Path(target).read_bytes() == b"old binary"


def test_cli_download_failure_json(tmp_path: Path, install_dir: str, capsys) -> None:
    """TC-03: JSON output reports the download stage and no rollback issue."""
    target = os.path.join(install_dir, "myapp")
    code = _run(_base_args(tmp_path, target) + ["--json"], ConnectionError("offline"))

    assert code == 1
    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is False
    assert result["error_kind"] == "download"
    assert result["rollback_failed"] is False


def test_cli_missing_configuration(capsys) -> None:
    """TC-04: Missing required values exit with the configuration code."""
    assert main(["--cmd-name", "myapp"]) == 2
    assert "Missing required configuration value" in capsys.readouterr().err


def test_cli_missing_target(tmp_path: Path, capsys) -> None:
    """TC-05: Without target or install dir the CLI refuses to guess."""
    argv = [
        "--cmd-name", "myapp",
        "--base-url", "https://dl.example.com",
        "--version", "2.0.0",
    ]
    assert main(argv) == 2
    assert "No target executable" in capsys.readouterr().err


def test_cli_config_file_merge(tmp_path: Path, install_dir: str, capsys) -> None:
    """TC-06: Flags override values loaded from the configuration file."""
    conf = tmp_path / "update.json"
    conf.write_text(json.dumps({
        "cmd_name": "myapp",
        "bin_url": "https://old.example.com",
        "version": "1.0.0",
        "install_dir": install_dir,
        "os": "linux",
        "arch": "amd64",
        "staging_root": str(tmp_path),
    }), encoding="utf-8")

    fetcher = FakeFetcher(build_tar_gz(release_entries()))
    with patch("selfupdate.interface.cli.app.HttpFetcher", return_value=fetcher):
        code = main(["-c", str(conf), "--version", "2.0.0"])

    assert code == 0
    assert fetcher.urls == ["https://old.example.com/myapp/2.0.0/linux-amd64.tar.gz"]
    assert Path(install_dir, "myapp").read_bytes() == b"new binary"


def test_cli_unreadable_config_file(tmp_path: Path, capsys) -> None:
    """TC-07: A broken configuration file is a configuration error."""
    conf = tmp_path / "broken.json"
    conf.write_text("{not json", encoding="utf-8")
    assert main(["-c", str(conf)]) == 2
    assert "Cannot load configuration file" in capsys.readouterr().err


def test_cli_print_platform(capsys) -> None:
    """TC-08: The platform query prints the triple and the artifact name."""
    assert main(["--print-platform", "--os", "windows", "--arch", "amd64"]) == 0
    assert capsys.readouterr().out.splitlines() == ["windows-amd64", "windows-amd64.zip"]


def test_cli_print_platform_unsupported(capsys) -> None:
    """TC-09: Unsupported platforms are rejected by the query."""
    assert main(["--print-platform", "--os", "plan9", "--arch", "amd64"]) == 2
    assert "unsupported operating system: plan9" in capsys.readouterr().err


def test_cli_shared_library_query(capsys) -> None:
    """TC-10: The shared library query prints file name and archive format."""
    assert main(["--shared-lib", "foo", "--os", "linux", "--arch", "amd64"]) == 0
    assert capsys.readouterr().out.strip() == "libfoo.so tar.gz"


def test_cli_interrupted(tmp_path: Path, install_dir: str, capsys) -> None:
    """TC-11: Ctrl+C during the attempt exits 130."""
    target = os.path.join(install_dir, "myapp")
    code = _run(_base_args(tmp_path, target), KeyboardInterrupt())

    assert code == 130
    assert Path(target).read_bytes() == b"old binary"


def test_cli_shared_library_uses_config_file(tmp_path: Path, capsys) -> None:
    """TC-12: The shared library query honours the platform from the config file."""
    conf = tmp_path / "update.json"
    conf.write_text(json.dumps({"os": "windows", "arch": "amd64"}), encoding="utf-8")

    assert main(["-c", str(conf), "--shared-lib", "foo"]) == 0
    assert capsys.readouterr().out.strip() == "fooamd64.dll zip"


def test_cli_shared_library_unsupported(capsys) -> None:
    """TC-13: Platforms missing from the shared library table exit 2."""
    assert main(["--shared-lib", "foo", "--os", "windows", "--arch", "386"]) == 2
    assert "ERROR:" in capsys.readouterr().err
