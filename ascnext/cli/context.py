from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from ascnext.core.config import Config, ConfigError, load_config
from ascnext.core.errors import ErrorCode
from ascnext.core.result import Err
from ascnext.infra.asc_client import AppStoreConnectBackend
from ascnext.infra.http import RealHttpClient
from ascnext.output.console import ConsoleProtocol, RichConsole
from ascnext.release.backend import ReleaseBackend
from ascnext.release.errors import ReleaseError, exit_code_for


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    backend: ReleaseBackend


def config_error(error: ConfigError) -> ReleaseError:
    return ReleaseError(
        kind="config_invalid",
        message=error.message,
        hint="Fix the file or drop --config / ASCNEXT_CONFIG to use the defaults.",
        reason=str(error.path) if error.path is not None else None,
    )


def resolve_config(path: Path | None) -> Config:
    """Load ``path`` or exit with the config_invalid code; no path means defaults."""
    if path is None:
        return Config()
    result = load_config(path)
    if isinstance(result, Err):
        error = config_error(result.error)
        typer.echo(f"error: {error.pretty()}", err=True)
        raise typer.Exit(code=int(exit_code_for(error)))
    return result.value


def build_context(*, config_path: Path | None, token: str | None, verbose: bool) -> CLIContext:
    if not token or not token.strip():
        typer.echo("error: an App Store Connect token is required (--token or ASC_TOKEN)", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = resolve_config(config_path)
    console = RichConsole(verbose=verbose)
    http = RealHttpClient(
        timeout=config.api.timeout_seconds,
        retry_attempts=config.api.retry_attempts,
        retry_delay=config.api.retry_delay_seconds,
        on_request=lambda method, url: console.debug(f"[HTTP] {method} {url}"),
    )
    backend = AppStoreConnectBackend(
        http,
        token=token.strip(),
        console=console,
        base_url=config.api.base_url,
    )
    return CLIContext(config=config, console=console, backend=backend)
