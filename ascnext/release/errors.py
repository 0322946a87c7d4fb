"""Error types for the release decision context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ascnext.core.errors import ErrorCode

ReleaseErrorKind = Literal[
    "validation",
    "app_not_found",
    "no_live_version",
    "data_inconsistency",
    "version_not_incrementable",
    "api_error",
    "config_invalid",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload.

    ``kind`` is the stable code callers branch on. ``reason`` is a
    machine-readable detail and ``hint`` tells a human what to do next.

    For ``version_not_incrementable`` the reason is the lifecycle state code
    (``READY_FOR_SALE``, ``PENDING_CONTRACT``, ...). The readable explanation,
    such as "already live", is carried by ``message`` and ``hint``.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    reason: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def exit_code_for(error: ReleaseError) -> ErrorCode:
    match error.kind:
        case "validation":
            return ErrorCode.USER_ERROR
        case "config_invalid":
            return ErrorCode.ENV_ERROR
        case "version_not_incrementable":
            return ErrorCode.RELEASE_BLOCKED
        case "api_error":
            return ErrorCode.NETWORK_ERROR
        case "app_not_found" | "no_live_version" | "data_inconsistency":
            return ErrorCode.DATA_ERROR
    return ErrorCode.USER_ERROR
