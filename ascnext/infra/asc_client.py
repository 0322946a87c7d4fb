"""App Store Connect implementation of :class:`ReleaseBackend`.

Speaks the JSON:API endpoints of ``api.appstoreconnect.apple.com/v1``.
Tokens are minted elsewhere; this adapter only sends them as a bearer
header.
"""

from __future__ import annotations

from ascnext.core.result import Err, Ok, Result
from ascnext.core.structured import StrDict, data_items, get_str, get_table
from ascnext.infra.http import HttpClient, HttpError, HttpMethod, Params
from ascnext.output.console import ConsoleProtocol
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
from ascnext.release.version import BuildNumber, Version, parse_build_number, parse_version


def _api_error(error: HttpError, *, what: str) -> ReleaseError:
    return ReleaseError(
        kind="api_error",
        message=f"{what} failed: {error}",
        hint=error.message if error.status else "Check network connectivity and retry.",
        reason=str(error.status),
    )


def _malformed(what: str, detail: str) -> ReleaseError:
    return ReleaseError(
        kind="api_error",
        message=f"unexpected {what} payload: {detail}",
        reason="malformed_payload",
    )


def _attributes(resource: StrDict) -> StrDict:
    return get_table(resource, "attributes") or {}


def _release_from_resource(resource: StrDict) -> Result[ReleaseRecord, ReleaseError]:
    rid = get_str(resource, "id")
    attrs = _attributes(resource)
    version_text = get_str(attrs, "versionString")
    if rid is None or version_text is None:
        return Err(_malformed("appStoreVersions", "missing id or versionString"))

    version = parse_version(version_text)
    if isinstance(version, Err):
        return version

    platform_raw = get_str(attrs, "platform") or Platform.IOS.value
    try:
        platform = Platform.parse(platform_raw)
    except ValueError as e:
        return Err(_malformed("appStoreVersions", str(e)))

    state_raw = get_str(attrs, "appStoreState") or get_str(attrs, "appVersionState")
    return Ok(
        ReleaseRecord.from_backend(
            id=rid,
            version=version.value,
            state=ReleaseState.from_wire(state_raw),
            platform=platform,
            created_date=get_str(attrs, "createdDate"),
        )
    )


def _build_from_resource(resource: StrDict) -> Result[BuildInfo, ReleaseError]:
    bid = get_str(resource, "id")
    attrs = _attributes(resource)
    raw = get_str(attrs, "version")
    if bid is None or raw is None:
        return Err(_malformed("builds", "missing id or version"))
    number = parse_build_number(raw)
    if isinstance(number, Err):
        return number
    return Ok(
        BuildInfo(
            id=bid,
            number=number.value,
            uploaded_date=get_str(attrs, "uploadedDate"),
            processing_state=get_str(attrs, "processingState"),
        )
    )


class AppStoreConnectBackend:
    def __init__(
        self,
        http: HttpClient,
        *,
        token: str,
        console: ConsoleProtocol,
        base_url: str = "https://api.appstoreconnect.apple.com/v1",
    ) -> None:
        self._http = http
        self._token = token
        self._console = console
        self._base_url = base_url.rstrip("/")

    def _call(
        self,
        method: HttpMethod,
        path: str,
        *,
        what: str,
        params: Params | None = None,
        body: StrDict | None = None,
    ) -> Result[StrDict, ReleaseError]:
        url = f"{self._base_url}{path}"
        self._console.debug(f"[API] {method} {path}")
        result = self._http.request_json(
            method,
            url,
            params=params,
            body=body,
            headers={"Authorization": f"Bearer {self._token}"},
        )
        if isinstance(result, Err):
            return Err(_api_error(result.error, what=what))
        return Ok(result.value)

    def find_application(self, bundle_id: str) -> Result[Application, ReleaseError]:
        payload = self._call(
            "GET", "/apps", what="app lookup", params={"filter[bundleId]": bundle_id}
        )
        not_found = ReleaseError(
            kind="app_not_found",
            message=f"No app found with bundle ID: {bundle_id}",
            hint="Check the bundle id and that the API key has access to the app.",
            reason=bundle_id,
        )
        if isinstance(payload, Err):
            return Err(not_found) if payload.error.reason == "404" else payload

        items = data_items(payload.value)
        if not items:
            return Err(not_found)

        resource = items[0]
        app_id = get_str(resource, "id")
        if app_id is None:
            return Err(_malformed("apps", "missing id"))
        attrs = _attributes(resource)
        return Ok(
            Application(
                id=app_id,
                bundle_id=get_str(attrs, "bundleId") or bundle_id,
                name=get_str(attrs, "name") or "",
                sku=get_str(attrs, "sku") or "",
                primary_locale=get_str(attrs, "primaryLocale") or "",
            )
        )

    def list_releases(
        self, app_id: str, filt: ReleaseFilter
    ) -> Result[list[ReleaseRecord], ReleaseError]:
        params: dict[str, str | int] = {}
        if filt.state is not None:
            params["filter[appStoreState]"] = filt.state.value
        if filt.version_string is not None:
            params["filter[versionString]"] = filt.version_string
        if filt.platform is not None:
            params["filter[platform]"] = filt.platform.value
        if filt.limit is not None:
            params["limit"] = filt.limit

        payload = self._call(
            "GET", f"/apps/{app_id}/appStoreVersions", what="version listing", params=params
        )
        if isinstance(payload, Err):
            return payload

        out: list[ReleaseRecord] = []
        for resource in data_items(payload.value):
            record = _release_from_resource(resource)
            if isinstance(record, Err):
                return record
            out.append(record.value)
        return Ok(out)

    def resolve_build_for_release(self, release_id: str) -> Result[BuildNumber, ReleaseError]:
        payload = self._call(
            "GET", f"/appStoreVersions/{release_id}/build", what="attached build lookup"
        )
        if isinstance(payload, Err):
            return payload

        items = data_items(payload.value)
        if not items or not get_table(items[0], "attributes"):
            return Ok(BuildNumber.ZERO)
        build = _build_from_resource(items[0])
        if isinstance(build, Err):
            return build
        return Ok(build.value.number)

    def list_pre_release_trains(
        self, app_id: str, version: str
    ) -> Result[list[PreReleaseTrain], ReleaseError]:
        payload = self._call(
            "GET",
            "/preReleaseVersions",
            what="pre-release train lookup",
            params={"filter[app]": app_id, "filter[version]": version, "limit": 1},
        )
        if isinstance(payload, Err):
            return payload

        trains: list[PreReleaseTrain] = []
        for resource in data_items(payload.value):
            tid = get_str(resource, "id")
            if tid is None:
                continue
            train_version = get_str(_attributes(resource), "version") or version
            trains.append(PreReleaseTrain(id=tid, version=train_version))
        return Ok(trains)

    def list_builds(self, app_id: str, filt: BuildFilter) -> Result[list[BuildInfo], ReleaseError]:
        params: dict[str, str | int] = {
            "filter[app]": app_id,
            "sort": filt.sort,
            "limit": filt.limit or 10,
        }
        if filt.version is not None:
            params["filter[preReleaseVersion.version]"] = filt.version
        if filt.pre_release_train_id is not None:
            params["filter[preReleaseVersion]"] = filt.pre_release_train_id

        payload = self._call("GET", "/builds", what="build listing", params=params)
        if isinstance(payload, Err):
            return payload

        out: list[BuildInfo] = []
        for resource in data_items(payload.value):
            build = _build_from_resource(resource)
            if isinstance(build, Err):
                return build
            out.append(build.value)
        return Ok(out)

    def create_release(
        self, app_id: str, version: Version, platform: Platform
    ) -> Result[ReleaseRecord, ReleaseError]:
        body: StrDict = {
            "data": {
                "type": "appStoreVersions",
                "attributes": {
                    "platform": platform.value,
                    "versionString": str(version),
                },
                "relationships": {
                    "app": {"data": {"type": "apps", "id": app_id}},
                },
            }
        }
        payload = self._call("POST", "/appStoreVersions", what="version creation", body=body)
        if isinstance(payload, Err):
            return payload

        items = data_items(payload.value)
        if not items:
            return Err(_malformed("appStoreVersions", "empty creation response"))
        return _release_from_resource(items[0])
