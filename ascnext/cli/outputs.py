"""Publishing step outputs for CI."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from pathlib import Path

from ascnext.core.result import Err, Ok, Result
from ascnext.output.console import ConsoleProtocol, Style
from ascnext.release.decision import VersionAction
from ascnext.release.orchestrator import NextVersionResult


def format_outputs(outputs: Mapping[str, str]) -> str:
    """``key=value`` lines; multi-line values use the heredoc form."""
    lines: list[str] = []
    for key, value in outputs.items():
        if "\n" in value:
            delim = f"ghadelimiter_{uuid.uuid4().hex}"
            lines.append(f"{key}<<{delim}")
            lines.append(value)
            lines.append(delim)
        else:
            lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


def append_outputs(path: Path, outputs: Mapping[str, str]) -> Result[None, str]:
    try:
        with path.open("a", encoding="utf-8") as f:
            f.write(format_outputs(outputs))
    except OSError as e:
        return Err(f"failed to write step outputs to {path}: {e}")
    return Ok(None)


def print_summary(result: NextVersionResult, console: ConsoleProtocol) -> None:
    console.header("Execution summary")
    console.print(f"App name:      {result.app.name}")
    console.print(f"Bundle ID:     {result.app.bundle_id}")
    console.print(f"Live version:  {result.live_version} (build {result.live_build_number})")
    console.print(f"Next version:  {result.version or '-'}")
    console.print(f"Next build:    {result.build_number or '-'}")
    console.print(f"Action:        {result.action.value.upper()}")

    if result.version_created:
        console.success("New version created")
    elif result.action is VersionAction.CREATE_NEW_VERSION:
        console.print("Version not created (create-new-version is off)", Style.DIM)
    elif result.action is VersionAction.INCREMENT_BUILD:
        console.success("Build number incremented")
    elif result.skip_reason:
        console.warning(f"Skipped: {result.skip_reason}")
