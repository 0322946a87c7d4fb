from __future__ import annotations

from dataclasses import dataclass

from ascnext.core.result import Err, Ok, Result
from ascnext.output.console import ConsoleProtocol
from ascnext.release.backend import ReleaseBackend
from ascnext.release.decision import (
    BlockedPolicy,
    VersionAction,
    determine,
    is_valid_version_transition,
    next_version,
    require_live_build,
)
from ascnext.release.errors import ReleaseError
from ascnext.release.model import (
    Application,
    Platform,
    ReleaseFilter,
    ReleaseRecord,
    ReleaseState,
)
from ascnext.release.resolver import complete_release, resolve_app_max_build
from ascnext.release.version import BuildNumber, VersionBump


@dataclass(frozen=True, slots=True)
class NextVersionRequest:
    bundle_id: str
    platform: Platform = Platform.IOS
    create_new_version_if_absent: bool = False
    bump: VersionBump = "patch"
    on_blocked: BlockedPolicy = "fail"


@dataclass(frozen=True, slots=True)
class NextVersionResult:
    app: Application
    live_version: str
    live_build_number: int
    version: str
    build_number: str
    action: VersionAction
    version_created: bool
    skip_reason: str | None = None

    def as_outputs(self) -> dict[str, str]:
        """Step outputs, keyed the way CI workflows consume them."""
        out = {
            "version": self.version,
            "buildNumber": self.build_number,
            "action": self.action.value,
            "versionCreated": "true" if self.version_created else "false",
            "appName": self.app.name,
            "bundleId": self.app.bundle_id,
            "liveVersion": self.live_version,
            "liveBuildNumber": str(self.live_build_number),
        }
        if self.skip_reason:
            out["skipReason"] = self.skip_reason
        return out


def find_live_release(
    backend: ReleaseBackend,
    app_id: str,
    *,
    console: ConsoleProtocol,
    limit: int = 10,
) -> Result[ReleaseRecord, ReleaseError]:
    """Highest READY_FOR_SALE version of the app, without its build number."""
    result = backend.list_releases(
        app_id, ReleaseFilter(state=ReleaseState.READY_FOR_SALE, limit=limit)
    )
    if isinstance(result, Err):
        return result

    for i, r in enumerate(result.value):
        console.debug(f"[{i}] {r.version} ({r.state.value})")

    # The state filter is applied server-side, but do not trust it blindly.
    live = [r for r in result.value if r.is_live_version()]
    if not live:
        return Err(
            ReleaseError(
                kind="no_live_version",
                message="No live version found for app. This action requires a published app.",
                hint="Publish a first version in App Store Connect before using this tool.",
            )
        )
    return Ok(max(live, key=lambda r: r.version))


def find_release(
    backend: ReleaseBackend,
    app_id: str,
    version: str,
    *,
    console: ConsoleProtocol,
) -> Result[ReleaseRecord | None, ReleaseError]:
    """Exact version-string match, or None."""
    result = backend.list_releases(app_id, ReleaseFilter(version_string=version))
    if isinstance(result, Err):
        return result

    console.debug(f"Searching for version {version}, found {len(result.value)} version(s)")
    for r in result.value:
        if str(r.version) == version:
            console.info(f"Version {version} exists in state {r.state.value}")
            return Ok(r)

    console.info(f"Version {version} does not exist yet")
    return Ok(None)


def determine_next_version(
    backend: ReleaseBackend,
    request: NextVersionRequest,
    *,
    console: ConsoleProtocol,
    live_lookup_limit: int = 10,
    build_lookup_limit: int = 10,
) -> Result[NextVersionResult, ReleaseError]:
    """Work out the next version and build number for ``request.bundle_id``.

    Backend calls are made one after another. Failures of the mandatory
    lookups and of the decision itself are returned unchanged; only the
    build number cascade absorbs errors.
    """
    app_result = backend.find_application(request.bundle_id)
    if isinstance(app_result, Err):
        return app_result
    app = app_result.value
    console.info(f"Found app: {app.name} ({app.id})")

    live_result = find_live_release(backend, app.id, console=console, limit=live_lookup_limit)
    if isinstance(live_result, Err):
        return live_result
    live = complete_release(backend, live_result.value, app.id, console=console)

    live_build = require_live_build(live)
    if isinstance(live_build, Err):
        return live_build
    console.info(f"Current live version: {live.version} (build {live_build.value})")

    app_max = resolve_app_max_build(backend, app.id, console=console, limit=build_lookup_limit)
    current_max: BuildNumber = max(live_build.value, app_max)
    if app_max.is_greater_than(live_build.value):
        console.info(f"Builds up to {app_max} already uploaded; using that as the floor")

    candidate_version = next_version(live.version, request.bump)
    if not is_valid_version_transition(live.version, candidate_version):
        return Err(
            ReleaseError(
                kind="validation",
                message=f"Next version {candidate_version} is not above {live.version}",
                reason="version",
            )
        )
    console.info(f"Calculated next version: {candidate_version}")

    found = find_release(backend, app.id, str(candidate_version), console=console)
    if isinstance(found, Err):
        return found
    candidate = found.value
    if candidate is not None:
        candidate = complete_release(backend, candidate, app.id, console=console)

    decision = determine(candidate, current_max, on_blocked=request.on_blocked)
    if isinstance(decision, Err):
        return decision
    d = decision.value

    version_created = False
    if d.requires_creation and request.create_new_version_if_absent:
        created = backend.create_release(app.id, candidate_version, request.platform)
        if isinstance(created, Err):
            return created
        version_created = True
        console.success(f"Created new version: {candidate_version}")

    skipped = d.action is VersionAction.SKIP
    if skipped:
        console.warning(d.reason or f"skipping version {candidate_version}")

    return Ok(
        NextVersionResult(
            app=app,
            live_version=str(live.version),
            live_build_number=int(live_build.value),
            version="" if skipped else str(candidate_version),
            build_number=str(d.build_number) if d.build_number is not None else "",
            action=d.action,
            version_created=version_created,
            skip_reason=d.reason if skipped else None,
        )
    )
