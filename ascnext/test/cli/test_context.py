from __future__ import annotations

from pathlib import Path

import pytest
import typer

from ascnext.cli.context import build_context, config_error, resolve_config
from ascnext.core.config import Config, ConfigError
from ascnext.core.errors import ErrorCode
from ascnext.infra.asc_client import AppStoreConnectBackend
from ascnext.release.errors import exit_code_for


def test_missing_token_exits_env_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(typer.Exit) as exc:
        build_context(config_path=None, token="  ", verbose=False)
    assert exc.value.exit_code == ErrorCode.ENV_ERROR
    assert "ASC_TOKEN" in capsys.readouterr().err


def test_bad_config_exits_env_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "ascnext.toml"
    path.write_text("[api]\ntimeout_seconds = -1\n", encoding="utf-8")
    with pytest.raises(typer.Exit) as exc:
        resolve_config(path)
    assert exc.value.exit_code == ErrorCode.ENV_ERROR
    err = capsys.readouterr().err
    assert "timeout_seconds" in err
    assert "hint:" in err


def test_config_error_maps_to_config_invalid(tmp_path: Path) -> None:
    error = config_error(ConfigError("Invalid TOML syntax", path=tmp_path / "x.toml"))
    assert error.kind == "config_invalid"
    assert error.reason == str(tmp_path / "x.toml")
    assert exit_code_for(error) == ErrorCode.ENV_ERROR


def test_config_directory_exits_env_error(tmp_path: Path) -> None:
    with pytest.raises(typer.Exit) as exc:
        resolve_config(tmp_path)
    assert exc.value.exit_code == ErrorCode.ENV_ERROR


def test_no_config_path_uses_defaults() -> None:
    assert resolve_config(None) == Config()


def test_builds_real_backend(tmp_path: Path) -> None:
    path = tmp_path / "ascnext.toml"
    path.write_text('[api]\nbase_url = "https://asc.example.test/v1"\n', encoding="utf-8")

    ctx = build_context(config_path=path, token="tok", verbose=True)

    assert isinstance(ctx.backend, AppStoreConnectBackend)
    assert ctx.config.api.base_url == "https://asc.example.test/v1"
