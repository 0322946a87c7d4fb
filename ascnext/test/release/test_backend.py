from __future__ import annotations

from ascnext.core.result import Err, Ok
from ascnext.release.backend import MemoryBackend, ReleaseBackend
from ascnext.release.errors import ReleaseError
from ascnext.release.model import (
    BuildFilter,
    BuildInfo,
    Platform,
    ReleaseFilter,
    ReleaseRecord,
    ReleaseState,
)
from ascnext.release.version import BuildNumber, Version


def _record(rid: str, version: str, state: ReleaseState, build: int = 0) -> ReleaseRecord:
    return ReleaseRecord(
        id=rid,
        version=Version.parse(version),
        state=state,
        platform=Platform.IOS,
        build_number=BuildNumber(build),
    )


def test_memory_backend_satisfies_protocol() -> None:
    assert isinstance(MemoryBackend(), ReleaseBackend)


def test_list_releases_filters_and_strips_builds() -> None:
    backend = MemoryBackend()
    backend.add_release("app", _record("a", "1.0.0", ReleaseState.READY_FOR_SALE, build=4))
    backend.add_release("app", _record("b", "1.0.1", ReleaseState.IN_REVIEW))

    result = backend.list_releases("app", ReleaseFilter(state=ReleaseState.READY_FOR_SALE))

    assert isinstance(result, Ok)
    assert [r.id for r in result.value] == ["a"]
    assert result.value[0].build_number == BuildNumber.ZERO


def test_list_builds_sorts_descending_and_limits() -> None:
    backend = MemoryBackend()
    for n in (3, 9, 5):
        backend.add_build("app", BuildInfo(id=str(n), number=BuildNumber(n)), version="1.0.0")

    result = backend.list_builds("app", BuildFilter(limit=2))

    assert isinstance(result, Ok)
    assert [int(b.number) for b in result.value] == [9, 5]


def test_injected_failure_is_returned_and_recorded() -> None:
    backend = MemoryBackend()
    error = ReleaseError(kind="api_error", message="boom")
    backend.fail("resolve_build_for_release", error)

    assert backend.resolve_build_for_release("x") == Err(error)
    assert backend.called("resolve_build_for_release") == 1


def test_create_release_appends_record() -> None:
    backend = MemoryBackend()
    result = backend.create_release("app", Version(2, 0, 0), Platform.MAC_OS)
    assert isinstance(result, Ok)
    assert result.value.state is ReleaseState.PREPARE_FOR_SUBMISSION
    assert backend.releases["app"] == [result.value]
