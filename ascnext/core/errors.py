"""Process exit codes.

The CLI maps every failure onto one of these values so CI scripts can tell
"fix your inputs" apart from "the backend said no".
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad input, invalid version strings)
    - 2: Environment error (missing token, unreadable config)
    - 3: Release blocked (candidate version cannot take new builds)
    - 4: Network error (API unreachable, request rejected)
    - 5: Data error (app or live version missing, inconsistent backend data)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_BLOCKED = 3
    NETWORK_ERROR = 4
    DATA_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
