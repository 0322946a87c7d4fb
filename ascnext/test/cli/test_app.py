from __future__ import annotations

from typer.testing import CliRunner

from ascnext import __version__
from ascnext.cli.app import app


def test_version_flag() -> None:
    result = CliRunner().invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_next_requires_bundle_id() -> None:
    result = CliRunner().invoke(app, ["next", "--token", "tok"])
    assert result.exit_code == 2
