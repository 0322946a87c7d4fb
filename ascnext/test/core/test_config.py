"""Tests for ascnext.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ascnext.core.config import (
    DEFAULT_BASE_URL,
    ApiConfig,
    Config,
    ConfigError,
    ReleaseConfig,
    load_config,
)
from ascnext.core.result import Err, Ok
from ascnext.release.model import Platform


class TestDefaults:
    def test_api_defaults(self) -> None:
        config = ApiConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout_seconds == 30.0
        assert config.retry_attempts == 3

    def test_release_defaults(self) -> None:
        config = ReleaseConfig()
        assert config.platform is Platform.IOS
        assert config.bump == "patch"
        assert config.on_blocked == "fail"

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.api = ApiConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty_mapping_gives_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_full_mapping(self) -> None:
        config = Config.from_dict(
            {
                "api": {
                    "base_url": "https://asc.example.test/v1/",
                    "timeout_seconds": 5,
                    "retry_attempts": 0,
                    "retry_delay_seconds": 0.5,
                },
                "release": {
                    "platform": "mac_os",
                    "bump": "minor",
                    "on_blocked": "skip",
                    "live_lookup_limit": 20,
                    "build_lookup_limit": 50,
                },
            }
        )
        assert config.api.base_url == "https://asc.example.test/v1"
        assert config.api.timeout_seconds == 5.0
        assert config.api.retry_attempts == 0
        assert config.release.platform is Platform.MAC_OS
        assert config.release.bump == "minor"
        assert config.release.on_blocked == "skip"
        assert config.release.live_lookup_limit == 20
        assert config.release.build_lookup_limit == 50

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"api": {"timeout_seconds": 0}}, "timeout_seconds"),
            ({"api": {"retry_attempts": -1}}, "retry_attempts"),
            ({"release": {"bump": "huge"}}, "release.bump"),
            ({"release": {"on_blocked": "ignore"}}, "release.on_blocked"),
            ({"release": {"platform": "android"}}, "invalid platform"),
            ({"release": {"live_lookup_limit": 0}}, "live_lookup_limit"),
        ],
    )
    def test_invalid_values(self, data: dict[str, object], message: str) -> None:
        with pytest.raises(ValueError, match=message):
            Config.from_dict(data)


class TestLoadConfig:
    def test_load_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ascnext.toml"
        path.write_text('[release]\nbump = "major"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.release.bump == "major"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "missing.toml")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[release\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text('[release]\non_blocked = "ignore"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.message.startswith("Invalid config:")
        assert result.error.path == path

    def test_directory_is_an_error(self, tmp_path: Path) -> None:
        result = load_config(tmp_path)
        assert isinstance(result, Err)
        assert result.error.path == tmp_path

    def test_policy_values_are_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "ascnext.toml"
        path.write_text('[release]\nbump = "Minor"\non_blocked = "SKIP"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.release.bump == "minor"
        assert result.value.release.on_blocked == "skip"
