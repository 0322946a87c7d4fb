"""Next-action state machine.

Pure functions only: everything here works on values fetched beforehand by
the orchestrator and never touches the backend.

    candidate absent            -> new_version,     max + 1
    candidate incrementable     -> increment_build, max(candidate + 1, max + 1)
    candidate blocking          -> version_not_incrementable error (or skip)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from ascnext.core.result import Err, Ok, Result
from ascnext.release.errors import ReleaseError
from ascnext.release.model import ReleaseRecord
from ascnext.release.version import BuildNumber, Version, VersionBump

BlockedPolicy = Literal["fail", "skip"]

BLOCKED_POLICIES: tuple[BlockedPolicy, ...] = ("fail", "skip")


class VersionAction(StrEnum):
    CREATE_NEW_VERSION = "new_version"
    INCREMENT_BUILD = "increment_build"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class VersionDecision:
    action: VersionAction
    build_number: BuildNumber | None
    requires_creation: bool = False
    reason: str | None = None


def next_version(live: Version, bump: VersionBump = "patch") -> Version:
    """Candidate version derived from the live one. Patch unless asked otherwise."""
    return live.bump(bump)


def is_valid_version_transition(current: Version, proposed: Version) -> bool:
    return proposed.compare_to(current) > 0


def require_live_build(live: ReleaseRecord) -> Result[BuildNumber, ReleaseError]:
    """Build number of the live release, which must never be 0."""
    if live.build_number.is_zero():
        return Err(
            ReleaseError(
                kind="data_inconsistency",
                message=(
                    f"Live version {live.version} is {live.state.value} "
                    "but no build number could be resolved for it"
                ),
                hint="Check the build attached to the live version in App Store Connect.",
                reason=live.state.value,
            )
        )
    return Ok(live.build_number)


def _blocked_error(candidate: ReleaseRecord) -> ReleaseError:
    hint = candidate.blocking_hint() or ""
    return ReleaseError(
        kind="version_not_incrementable",
        message=f"Cannot add builds to version {candidate.version}: {hint}",
        hint=hint,
        reason=candidate.state.value,
    )


def _increment_build(candidate: ReleaseRecord, current_max: BuildNumber) -> BuildNumber:
    floor = current_max.increment()
    if candidate.build_number.is_zero():
        return floor
    own = candidate.calculate_next_build_number()
    return own if own.is_greater_than(floor) else floor


def determine(
    candidate: ReleaseRecord | None,
    current_max: BuildNumber,
    *,
    on_blocked: BlockedPolicy = "fail",
) -> Result[VersionDecision, ReleaseError]:
    """Decide what to do with the candidate version.

    Args:
        candidate: The release record for the candidate version, with its
            build number already resolved, or None if it does not exist.
        current_max: Highest build number known to be consumed.
        on_blocked: ``fail`` returns an error for blocking states, ``skip``
            returns a skip decision carrying the same explanation.
    """
    if candidate is None:
        return Ok(
            VersionDecision(
                action=VersionAction.CREATE_NEW_VERSION,
                build_number=current_max.increment(),
                requires_creation=True,
            )
        )

    if candidate.can_increment_build_number():
        return Ok(
            VersionDecision(
                action=VersionAction.INCREMENT_BUILD,
                build_number=_increment_build(candidate, current_max),
                requires_creation=False,
            )
        )

    error = _blocked_error(candidate)
    if on_blocked == "skip":
        return Ok(
            VersionDecision(
                action=VersionAction.SKIP,
                build_number=None,
                requires_creation=False,
                reason=error.message,
            )
        )
    return Err(error)
