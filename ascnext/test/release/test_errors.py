from __future__ import annotations

import pytest

from ascnext.core.errors import ErrorCode
from ascnext.release.errors import ReleaseError, exit_code_for


def test_pretty_includes_hint() -> None:
    error = ReleaseError(kind="validation", message="bad version", hint="Expected: X.Y.Z")
    assert error.pretty() == "bad version (hint: Expected: X.Y.Z)"


def test_pretty_without_hint() -> None:
    assert ReleaseError(kind="api_error", message="HTTP 500").pretty() == "HTTP 500"


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("validation", ErrorCode.USER_ERROR),
        ("config_invalid", ErrorCode.ENV_ERROR),
        ("version_not_incrementable", ErrorCode.RELEASE_BLOCKED),
        ("api_error", ErrorCode.NETWORK_ERROR),
        ("app_not_found", ErrorCode.DATA_ERROR),
        ("no_live_version", ErrorCode.DATA_ERROR),
        ("data_inconsistency", ErrorCode.DATA_ERROR),
    ],
)
def test_exit_code_for_kind(kind: str, code: ErrorCode) -> None:
    error = ReleaseError(kind=kind, message="x")  # type: ignore[arg-type]
    assert exit_code_for(error) == code
