"""Backend collaborator contract.

The decision logic only talks to App Store Connect through this protocol.
``AppStoreConnectBackend`` in ``ascnext.infra`` is the real implementation;
``MemoryBackend`` serves tests and offline experiments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ascnext.core.result import Err, Ok, Result
from ascnext.release.errors import ReleaseError
from ascnext.release.model import (
    Application,
    BuildFilter,
    BuildInfo,
    Platform,
    PreReleaseTrain,
    ReleaseFilter,
    ReleaseRecord,
    ReleaseState,
)
from ascnext.release.version import BuildNumber, Version

__all__ = [
    "ReleaseBackend",
    "MemoryBackend",
]


@runtime_checkable
class ReleaseBackend(Protocol):
    def find_application(self, bundle_id: str) -> Result[Application, ReleaseError]:
        """Look up an app by bundle id; ``app_not_found`` if there is none."""
        ...

    def list_releases(
        self, app_id: str, filt: ReleaseFilter
    ) -> Result[list[ReleaseRecord], ReleaseError]:
        """List App Store versions. Returned records carry build number 0."""
        ...

    def resolve_build_for_release(self, release_id: str) -> Result[BuildNumber, ReleaseError]:
        """Build attached to a release, ``BuildNumber.ZERO`` if none."""
        ...

    def list_pre_release_trains(
        self, app_id: str, version: str
    ) -> Result[list[PreReleaseTrain], ReleaseError]: ...

    def list_builds(self, app_id: str, filt: BuildFilter) -> Result[list[BuildInfo], ReleaseError]:
        """List builds honouring ``filt.sort`` and ``filt.limit``."""
        ...

    def create_release(
        self, app_id: str, version: Version, platform: Platform
    ) -> Result[ReleaseRecord, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class StoredBuild:
    """A build held by :class:`MemoryBackend`.

    ``version`` is the marketing version the build was uploaded for, and
    ``train_id`` links it to a pre-release train when known.
    """

    info: BuildInfo
    version: str
    train_id: str | None = None


def _no_failures() -> dict[str, ReleaseError]:
    return {}


def _no_calls() -> list[tuple[str, tuple[object, ...]]]:
    return []


@dataclass
class MemoryBackend:
    """In-memory backend with call recording and failure injection.

    ``failures`` maps a method name to the error it should return, which
    makes it easy to exercise each fallback tier of the resolver.
    """

    apps: dict[str, Application] = field(default_factory=dict)
    releases: dict[str, list[ReleaseRecord]] = field(default_factory=dict)
    release_builds: dict[str, BuildNumber] = field(default_factory=dict)
    trains: dict[str, list[PreReleaseTrain]] = field(default_factory=dict)
    builds: dict[str, list[StoredBuild]] = field(default_factory=dict)
    failures: dict[str, ReleaseError] = field(default_factory=_no_failures)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=_no_calls)
    _next_id: int = 1

    # Setup helpers

    def add_app(self, app: Application) -> None:
        self.apps[app.bundle_id] = app

    def add_release(
        self, app_id: str, release: ReleaseRecord, *, build: BuildNumber | None = None
    ) -> None:
        self.releases.setdefault(app_id, []).append(release)
        if build is not None:
            self.release_builds[release.id] = build

    def add_train(self, app_id: str, train: PreReleaseTrain) -> None:
        self.trains.setdefault(app_id, []).append(train)

    def add_build(
        self, app_id: str, build: BuildInfo, *, version: str, train_id: str | None = None
    ) -> None:
        self.builds.setdefault(app_id, []).append(
            StoredBuild(info=build, version=version, train_id=train_id)
        )

    def fail(self, method: str, error: ReleaseError) -> None:
        self.failures[method] = error

    def called(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    # ReleaseBackend

    def _record(self, method: str, *args: object) -> ReleaseError | None:
        self.calls.append((method, args))
        return self.failures.get(method)

    def find_application(self, bundle_id: str) -> Result[Application, ReleaseError]:
        if (err := self._record("find_application", bundle_id)) is not None:
            return Err(err)
        app = self.apps.get(bundle_id)
        if app is None:
            return Err(
                ReleaseError(
                    kind="app_not_found",
                    message=f"No app found with bundle ID: {bundle_id}",
                    reason=bundle_id,
                )
            )
        return Ok(app)

    def list_releases(
        self, app_id: str, filt: ReleaseFilter
    ) -> Result[list[ReleaseRecord], ReleaseError]:
        if (err := self._record("list_releases", app_id, filt)) is not None:
            return Err(err)
        out: list[ReleaseRecord] = []
        for r in self.releases.get(app_id, []):
            if filt.state is not None and r.state is not filt.state:
                continue
            if filt.version_string is not None and str(r.version) != filt.version_string:
                continue
            if filt.platform is not None and r.platform is not filt.platform:
                continue
            out.append(r.with_build_number(BuildNumber.ZERO))
        if filt.limit is not None:
            out = out[: filt.limit]
        return Ok(out)

    def resolve_build_for_release(self, release_id: str) -> Result[BuildNumber, ReleaseError]:
        if (err := self._record("resolve_build_for_release", release_id)) is not None:
            return Err(err)
        return Ok(self.release_builds.get(release_id, BuildNumber.ZERO))

    def list_pre_release_trains(
        self, app_id: str, version: str
    ) -> Result[list[PreReleaseTrain], ReleaseError]:
        if (err := self._record("list_pre_release_trains", app_id, version)) is not None:
            return Err(err)
        return Ok([t for t in self.trains.get(app_id, []) if t.version == version])

    def list_builds(self, app_id: str, filt: BuildFilter) -> Result[list[BuildInfo], ReleaseError]:
        if (err := self._record("list_builds", app_id, filt)) is not None:
            return Err(err)
        selected = [
            b
            for b in self.builds.get(app_id, [])
            if (filt.version is None or b.version == filt.version)
            and (filt.pre_release_train_id is None or b.train_id == filt.pre_release_train_id)
        ]
        infos = [b.info for b in selected]
        if filt.sort == "-version":
            infos.sort(key=lambda b: b.number, reverse=True)
        elif filt.sort == "version":
            infos.sort(key=lambda b: b.number)
        if filt.limit is not None:
            infos = infos[: filt.limit]
        return Ok(infos)

    def create_release(
        self, app_id: str, version: Version, platform: Platform
    ) -> Result[ReleaseRecord, ReleaseError]:
        if (err := self._record("create_release", app_id, version, platform)) is not None:
            return Err(err)
        release = ReleaseRecord.from_backend(
            id=f"mem-{self._next_id}",
            version=version,
            state=ReleaseState.PREPARE_FOR_SUBMISSION,
            platform=platform,
            created_date=None,
        )
        self._next_id += 1
        self.releases.setdefault(app_id, []).append(release)
        return Ok(release)
