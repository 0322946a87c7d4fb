"""next command - decide the next version and build number."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from ascnext.cli.context import build_context
from ascnext.cli.outputs import append_outputs, format_outputs, print_summary
from ascnext.core.errors import ErrorCode
from ascnext.core.result import Err
from ascnext.release.decision import BLOCKED_POLICIES, BlockedPolicy
from ascnext.release.errors import exit_code_for
from ascnext.release.model import Platform
from ascnext.release.orchestrator import NextVersionRequest, determine_next_version
from ascnext.release.version import VERSION_BUMPS, VersionBump


def _exit(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def _parse_platform(raw: str | None) -> Platform | None:
    if raw is None:
        return None
    try:
        return Platform.parse(raw)
    except ValueError as e:
        _exit(str(e), code=ErrorCode.USER_ERROR)


def _parse_bump(raw: str | None) -> VersionBump | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value not in VERSION_BUMPS:
        _exit(
            f"invalid bump: {raw}. Must be one of: {', '.join(VERSION_BUMPS)}",
            code=ErrorCode.USER_ERROR,
        )
    return value  # type: ignore[return-value]


def _parse_policy(raw: str | None) -> BlockedPolicy | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value not in BLOCKED_POLICIES:
        _exit(
            f"invalid on-blocked policy: {raw}. Must be one of: {', '.join(BLOCKED_POLICIES)}",
            code=ErrorCode.USER_ERROR,
        )
    return value  # type: ignore[return-value]


def next_version(
    bundle_id: str = typer.Option(..., "--bundle-id", help="Bundle ID of the app."),
    platform: str | None = typer.Option(
        None, "--platform", help="IOS, MAC_OS, TV_OS or VISION_OS (default from config: IOS)."
    ),
    create_new_version: bool = typer.Option(
        False,
        "--create-new-version/--no-create-new-version",
        help="Create the App Store version when it does not exist yet.",
    ),
    bump: str | None = typer.Option(
        None, "--bump", help="Version component to increment: patch (default), minor, major."
    ),
    on_blocked: str | None = typer.Option(
        None,
        "--on-blocked",
        help="When the next version cannot take builds: fail (default) or skip.",
    ),
    token: str | None = typer.Option(
        None, "--token", envvar="ASC_TOKEN", help="App Store Connect bearer token (JWT)."
    ),
    config: Path | None = typer.Option(
        None, "--config", envvar="ASCNEXT_CONFIG", help="Path to a TOML config file."
    ),
    github_output: Path | None = typer.Option(
        None, "--github-output", envvar="GITHUB_OUTPUT", help="Append step outputs to this file."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show API and lookup details."),
) -> None:
    """Determine the next version and build number from App Store Connect."""
    bundle = bundle_id.strip()
    if not bundle:
        _exit("--bundle-id must not be empty", code=ErrorCode.USER_ERROR)
    platform_value = _parse_platform(platform)
    bump_value = _parse_bump(bump)
    policy_value = _parse_policy(on_blocked)

    ctx = build_context(config_path=config, token=token, verbose=verbose)
    defaults = ctx.config.release
    request = NextVersionRequest(
        bundle_id=bundle,
        platform=platform_value or defaults.platform,
        create_new_version_if_absent=create_new_version,
        bump=bump_value or defaults.bump,
        on_blocked=policy_value or defaults.on_blocked,
    )

    result = determine_next_version(
        ctx.backend,
        request,
        console=ctx.console,
        live_lookup_limit=defaults.live_lookup_limit,
        build_lookup_limit=defaults.build_lookup_limit,
    )
    if isinstance(result, Err):
        ctx.console.error(result.error.pretty())
        if result.error.reason:
            ctx.console.print(f"reason: {result.error.reason}")
        raise typer.Exit(code=int(exit_code_for(result.error)))

    outputs = result.value.as_outputs()
    typer.echo(format_outputs(outputs), nl=False)
    if github_output is not None:
        written = append_outputs(github_output, outputs)
        if isinstance(written, Err):
            _exit(written.error, code=ErrorCode.ENV_ERROR)

    print_summary(result.value, ctx.console)
