"""Typed configuration loading and access.

An optional TOML file tunes the API transport and the release defaults:

    [api]
    base_url = "https://api.appstoreconnect.apple.com/v1"
    timeout_seconds = 30
    retry_attempts = 3
    retry_delay_seconds = 1.0

    [release]
    platform = "IOS"
    bump = "patch"
    on_blocked = "fail"
    live_lookup_limit = 10
    build_lookup_limit = 10

CLI options override whatever the file says.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ascnext.release.decision import BLOCKED_POLICIES, BlockedPolicy
from ascnext.release.model import Platform
from ascnext.release.version import VERSION_BUMPS, VersionBump

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "ApiConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "DEFAULT_BASE_URL",
]

DEFAULT_BASE_URL = "https://api.appstoreconnect.apple.com/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
DEFAULT_LOOKUP_LIMIT = 10


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """HTTP transport settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Defaults for the version decision."""

    platform: Platform = Platform.IOS
    bump: VersionBump = "patch"
    on_blocked: BlockedPolicy = "fail"
    live_lookup_limit: int = DEFAULT_LOOKUP_LIMIT
    build_lookup_limit: int = DEFAULT_LOOKUP_LIMIT


@dataclass(frozen=True, slots=True)
class Config:
    api: ApiConfig = field(default_factory=ApiConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a value is present but out of range.
        """
        api: StrDict = get_table(data, "api") or {}
        release: StrDict = get_table(data, "release") or {}

        timeout = get_float(api, "timeout_seconds")
        retry_attempts = get_int(api, "retry_attempts")
        retry_delay = get_float(api, "retry_delay_seconds")
        if timeout is not None and timeout <= 0:
            raise ValueError("api.timeout_seconds must be > 0")
        if retry_attempts is not None and retry_attempts < 0:
            raise ValueError("api.retry_attempts must be >= 0")
        if retry_delay is not None and retry_delay < 0:
            raise ValueError("api.retry_delay_seconds must be >= 0")

        platform_raw = get_str(release, "platform")
        platform = Platform.parse(platform_raw) if platform_raw else Platform.IOS

        bump = (get_str(release, "bump") or "patch").lower()
        if bump not in VERSION_BUMPS:
            raise ValueError(f"release.bump must be one of {', '.join(VERSION_BUMPS)}")

        on_blocked = (get_str(release, "on_blocked") or "fail").lower()
        if on_blocked not in BLOCKED_POLICIES:
            raise ValueError(f"release.on_blocked must be one of {', '.join(BLOCKED_POLICIES)}")

        live_limit = get_int(release, "live_lookup_limit")
        build_limit = get_int(release, "build_lookup_limit")
        for name, value in (("live_lookup_limit", live_limit), ("build_lookup_limit", build_limit)):
            if value is not None and value < 1:
                raise ValueError(f"release.{name} must be >= 1")

        return cls(
            api=ApiConfig(
                base_url=(get_str(api, "base_url") or DEFAULT_BASE_URL).rstrip("/"),
                timeout_seconds=timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS,
                retry_attempts=(
                    retry_attempts if retry_attempts is not None else DEFAULT_RETRY_ATTEMPTS
                ),
                retry_delay_seconds=(
                    retry_delay if retry_delay is not None else DEFAULT_RETRY_DELAY_SECONDS
                ),
            ),
            release=ReleaseConfig(
                platform=platform,
                bump=bump,  # type: ignore[arg-type]
                on_blocked=on_blocked,  # type: ignore[arg-type]
                live_lookup_limit=live_limit or DEFAULT_LOOKUP_LIMIT,
                build_lookup_limit=build_limit or DEFAULT_LOOKUP_LIMIT,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))
