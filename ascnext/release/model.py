from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from ascnext.release.version import BuildNumber, Version


class ReleaseState(StrEnum):
    """App Store version lifecycle states (``appStoreState``)."""

    READY_FOR_SALE = "READY_FOR_SALE"
    PREPARE_FOR_SUBMISSION = "PREPARE_FOR_SUBMISSION"
    WAITING_FOR_REVIEW = "WAITING_FOR_REVIEW"
    IN_REVIEW = "IN_REVIEW"
    REJECTED = "REJECTED"
    DEVELOPER_REJECTED = "DEVELOPER_REJECTED"
    METADATA_REJECTED = "METADATA_REJECTED"
    PENDING_CONTRACT = "PENDING_CONTRACT"
    WAITING_FOR_EXPORT_COMPLIANCE = "WAITING_FOR_EXPORT_COMPLIANCE"
    PROCESSING_FOR_APP_STORE = "PROCESSING_FOR_APP_STORE"
    ACCEPTED = "ACCEPTED"
    REPLACED_WITH_NEW_VERSION = "REPLACED_WITH_NEW_VERSION"
    REMOVED_FROM_SALE = "REMOVED_FROM_SALE"
    NOT_APPLICABLE_FOR_REVIEW = "NOT_APPLICABLE_FOR_REVIEW"
    INVALID_BINARY = "INVALID_BINARY"
    PENDING_DEVELOPER_RELEASE = "PENDING_DEVELOPER_RELEASE"
    DEVELOPER_REMOVED_FROM_SALE = "DEVELOPER_REMOVED_FROM_SALE"
    # Anything the backend adds later; always treated as blocking.
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, raw: str | None) -> ReleaseState:
        if raw is None:
            return cls.UNKNOWN
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.UNKNOWN


INCREMENTABLE_STATES: frozenset[ReleaseState] = frozenset(
    {
        ReleaseState.PREPARE_FOR_SUBMISSION,
        ReleaseState.REJECTED,
        ReleaseState.DEVELOPER_REJECTED,
        ReleaseState.METADATA_REJECTED,
        ReleaseState.WAITING_FOR_REVIEW,
        ReleaseState.IN_REVIEW,
    }
)

BLOCKING_STATES: frozenset[ReleaseState] = frozenset(ReleaseState) - INCREMENTABLE_STATES

_BLOCKING_HINTS: dict[ReleaseState, str] = {
    ReleaseState.READY_FOR_SALE: (
        "This version is already live on the App Store. "
        "Create a new version (e.g. increment to the next patch version)."
    ),
    ReleaseState.ACCEPTED: (
        "This version has been accepted and is waiting to be released. "
        "Either release it first or create a new version."
    ),
    ReleaseState.PROCESSING_FOR_APP_STORE: (
        "This version is being processed. Wait for processing to complete or create a new version."
    ),
    ReleaseState.PENDING_CONTRACT: (
        "This version is pending contract agreement. "
        "Resolve contract issues in App Store Connect or create a new version."
    ),
    ReleaseState.WAITING_FOR_EXPORT_COMPLIANCE: (
        "This version is waiting for export compliance. "
        "Complete export compliance in App Store Connect or create a new version."
    ),
    ReleaseState.PENDING_DEVELOPER_RELEASE: (
        "This version is approved and waiting for developer release. "
        "Release it or create a new version."
    ),
    ReleaseState.REPLACED_WITH_NEW_VERSION: (
        "This version has been replaced by a newer version. Use a higher version number."
    ),
    ReleaseState.REMOVED_FROM_SALE: (
        "This version has been removed from sale. Create a new version."
    ),
    ReleaseState.DEVELOPER_REMOVED_FROM_SALE: (
        "This version was removed from sale by the developer. Create a new version."
    ),
    ReleaseState.NOT_APPLICABLE_FOR_REVIEW: (
        "This version is not applicable for review. Create a new version."
    ),
    ReleaseState.INVALID_BINARY: (
        "The binary for this version was rejected as invalid. Create a new version."
    ),
}


def blocking_hint(state: ReleaseState) -> str:
    hint = _BLOCKING_HINTS.get(state)
    if hint is not None:
        return hint
    return f"This version is in state {state.value} which does not allow new builds."


class Platform(StrEnum):
    IOS = "IOS"
    MAC_OS = "MAC_OS"
    TV_OS = "TV_OS"
    VISION_OS = "VISION_OS"

    @classmethod
    def parse(cls, raw: str) -> Platform:
        """Parse a platform name, case-insensitively.

        Raises:
            ValueError: With the accepted values in the message.
        """
        try:
            return cls(raw.strip().upper())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"invalid platform: {raw}. Must be one of: {allowed}") from None


@dataclass(frozen=True, slots=True)
class Application:
    id: str
    bundle_id: str
    name: str
    sku: str = ""
    primary_locale: str = ""


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    """An App Store version as tracked by the backend.

    Version and state arrive from the version listing; the build number is
    resolved by a separate step and attached with :meth:`with_build_number`.
    """

    id: str
    version: Version
    state: ReleaseState
    platform: Platform
    created_date: str | None = None
    build_number: BuildNumber = BuildNumber.ZERO

    @classmethod
    def from_backend(
        cls,
        *,
        id: str,
        version: Version,
        state: ReleaseState,
        platform: Platform,
        created_date: str | None,
    ) -> ReleaseRecord:
        # Build number is never taken from a listing response.
        return cls(
            id=id,
            version=version,
            state=state,
            platform=platform,
            created_date=created_date,
            build_number=BuildNumber.ZERO,
        )

    def with_build_number(self, build_number: BuildNumber) -> ReleaseRecord:
        return replace(self, build_number=build_number)

    def can_increment_build_number(self) -> bool:
        return self.state in INCREMENTABLE_STATES

    def is_live_version(self) -> bool:
        return self.state is ReleaseState.READY_FOR_SALE

    def calculate_next_build_number(self) -> BuildNumber:
        return self.build_number.increment()

    def blocking_hint(self) -> str | None:
        if self.can_increment_build_number():
            return None
        return blocking_hint(self.state)


@dataclass(frozen=True, slots=True)
class BuildInfo:
    """One uploaded binary."""

    id: str
    number: BuildNumber
    uploaded_date: str | None = None
    processing_state: str | None = None


@dataclass(frozen=True, slots=True)
class PreReleaseTrain:
    """TestFlight train (``preReleaseVersions``) grouping builds of one version."""

    id: str
    version: str


@dataclass(frozen=True, slots=True)
class ReleaseFilter:
    state: ReleaseState | None = None
    version_string: str | None = None
    platform: Platform | None = None
    limit: int | None = None


@dataclass(frozen=True, slots=True)
class BuildFilter:
    version: str | None = None
    pre_release_train_id: str | None = None
    limit: int | None = None
    # "-version" sorts by build number, highest first.
    sort: str = "-version"
