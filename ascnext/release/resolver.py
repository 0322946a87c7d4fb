"""Build number resolution.

The build attached to an App Store version lags behind uploads: a binary
can be mid-processing, linked to a TestFlight train only, or not linked at
all yet. ``resolve_build_number`` therefore asks three sources in order and
keeps the first positive answer. A failing source is reported and skipped;
the cascade never fails as a whole.
"""

from __future__ import annotations

from collections.abc import Callable

from ascnext.core.result import Err, Ok, Result
from ascnext.output.console import ConsoleProtocol
from ascnext.release.backend import ReleaseBackend
from ascnext.release.errors import ReleaseError
from ascnext.release.model import BuildFilter, BuildInfo, ReleaseRecord
from ascnext.release.version import BuildNumber

type BuildSource = Callable[[], Result[BuildNumber, ReleaseError]]


def _highest(builds: list[BuildInfo]) -> BuildNumber:
    if not builds:
        return BuildNumber.ZERO
    return max(b.number for b in builds)


def _direct_source(backend: ReleaseBackend, release: ReleaseRecord) -> BuildSource:
    def run() -> Result[BuildNumber, ReleaseError]:
        return backend.resolve_build_for_release(release.id)

    return run


def _train_source(backend: ReleaseBackend, release: ReleaseRecord, app_id: str) -> BuildSource:
    def run() -> Result[BuildNumber, ReleaseError]:
        trains = backend.list_pre_release_trains(app_id, str(release.version))
        if isinstance(trains, Err):
            return trains
        if not trains.value:
            return Ok(BuildNumber.ZERO)
        builds = backend.list_builds(
            app_id,
            BuildFilter(pre_release_train_id=trains.value[0].id, limit=1, sort="-version"),
        )
        return builds.map(_highest)

    return run


def _search_source(backend: ReleaseBackend, release: ReleaseRecord, app_id: str) -> BuildSource:
    def run() -> Result[BuildNumber, ReleaseError]:
        builds = backend.list_builds(
            app_id,
            BuildFilter(version=str(release.version), limit=1, sort="-version"),
        )
        return builds.map(_highest)

    return run


def resolve_build_number(
    backend: ReleaseBackend,
    release: ReleaseRecord,
    app_id: str,
    *,
    console: ConsoleProtocol,
) -> BuildNumber:
    """Return the highest build already consumed by ``release``.

    Order: the release's attached build, then the newest build of the
    matching pre-release train, then a build search by app and version.
    ``BuildNumber.ZERO`` means no build exists yet, which is valid for a
    fresh version.
    """
    if not release.build_number.is_zero():
        return release.build_number

    version = str(release.version)
    sources: list[tuple[str, BuildSource]] = [
        ("attached build", _direct_source(backend, release)),
        ("pre-release train", _train_source(backend, release, app_id)),
        ("build search", _search_source(backend, release, app_id)),
    ]

    for label, source in sources:
        result = source()
        if isinstance(result, Err):
            console.warning(f"{label} lookup failed for {version}: {result.error.pretty()}")
            continue
        if not result.value.is_zero():
            console.info(f"Found build {result.value} for {version} via {label}")
            return result.value
        console.debug(f"{label} lookup found no build for {version}")

    console.info(f"No build found for {version}, using 0")
    return BuildNumber.ZERO


def complete_release(
    backend: ReleaseBackend,
    release: ReleaseRecord,
    app_id: str,
    *,
    console: ConsoleProtocol,
) -> ReleaseRecord:
    """Attach the resolved build number to ``release``."""
    build = resolve_build_number(backend, release, app_id, console=console)
    return release.with_build_number(build)


def resolve_app_max_build(
    backend: ReleaseBackend,
    app_id: str,
    *,
    console: ConsoleProtocol,
    limit: int = 10,
) -> BuildNumber:
    """Highest build number ever uploaded for the app, across all versions.

    Used as a floor so a stale release-to-build link can never make us hand
    out a number that is already taken.
    """
    result = backend.list_builds(app_id, BuildFilter(limit=limit, sort="-version"))
    if isinstance(result, Err):
        console.warning(f"app-wide build lookup failed: {result.error.pretty()}")
        return BuildNumber.ZERO
    highest = _highest(result.value)
    console.debug(f"app-wide max build: {highest}")
    return highest
