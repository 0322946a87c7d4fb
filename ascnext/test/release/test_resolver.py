from __future__ import annotations

from ascnext.output.console import MockConsole
from ascnext.release.backend import MemoryBackend
from ascnext.release.errors import ReleaseError
from ascnext.release.model import (
    BuildFilter,
    BuildInfo,
    Platform,
    PreReleaseTrain,
    ReleaseRecord,
    ReleaseState,
)
from ascnext.release.resolver import complete_release, resolve_app_max_build, resolve_build_number
from ascnext.release.version import BuildNumber, Version

APP_ID = "app-1"
_API_DOWN = ReleaseError(kind="api_error", message="HTTP 503: Service Unavailable")


def _release(version: str = "1.0.1", *, build: int = 0) -> ReleaseRecord:
    return ReleaseRecord(
        id="rel-1",
        version=Version.parse(version),
        state=ReleaseState.PREPARE_FOR_SUBMISSION,
        platform=Platform.IOS,
        build_number=BuildNumber(build),
    )


def _build(n: int) -> BuildInfo:
    return BuildInfo(id=f"b-{n}", number=BuildNumber(n))


def _train_builds_calls(backend: MemoryBackend) -> list[BuildFilter]:
    out: list[BuildFilter] = []
    for name, args in backend.calls:
        if name == "list_builds":
            filt = args[1]
            assert isinstance(filt, BuildFilter)
            out.append(filt)
    return out


def test_attached_build_wins_and_stops_cascade() -> None:
    backend = MemoryBackend()
    backend.release_builds["rel-1"] = BuildNumber(12)
    backend.add_build(APP_ID, _build(40), version="1.0.1")

    result = resolve_build_number(backend, _release(), APP_ID, console=MockConsole())

    assert result == BuildNumber(12)
    assert backend.called("list_pre_release_trains") == 0
    assert backend.called("list_builds") == 0


def test_already_resolved_release_needs_no_io() -> None:
    backend = MemoryBackend()
    result = resolve_build_number(backend, _release(build=5), APP_ID, console=MockConsole())
    assert result == BuildNumber(5)
    assert backend.calls == []


def test_first_source_failure_falls_back_to_train_and_skips_search() -> None:
    backend = MemoryBackend()
    backend.fail("resolve_build_for_release", _API_DOWN)
    backend.add_train(APP_ID, PreReleaseTrain(id="train-1", version="1.0.1"))
    backend.add_build(APP_ID, _build(7), version="1.0.1", train_id="train-1")
    backend.add_build(APP_ID, _build(9), version="1.0.1", train_id="train-1")
    console = MockConsole()

    result = resolve_build_number(backend, _release(), APP_ID, console=console)

    assert result == BuildNumber(9)
    filters = _train_builds_calls(backend)
    # Only the train-scoped query ran; the version search was never reached.
    assert len(filters) == 1
    assert filters[0].pre_release_train_id == "train-1"
    assert filters[0].sort == "-version"
    assert console.has_warning()
    assert console.find("attached build lookup failed")


def test_falls_through_to_version_search() -> None:
    backend = MemoryBackend()
    backend.add_build(APP_ID, _build(3), version="1.0.1")
    backend.add_build(APP_ID, _build(4), version="1.0.1")
    backend.add_build(APP_ID, _build(50), version="2.0.0")

    result = resolve_build_number(backend, _release(), APP_ID, console=MockConsole())

    assert result == BuildNumber(4)
    filters = _train_builds_calls(backend)
    assert filters[-1].version == "1.0.1"


def test_train_failure_is_reported_and_search_used() -> None:
    backend = MemoryBackend()
    backend.fail("list_pre_release_trains", _API_DOWN)
    backend.add_build(APP_ID, _build(6), version="1.0.1")
    console = MockConsole()

    result = resolve_build_number(backend, _release(), APP_ID, console=console)

    assert result == BuildNumber(6)
    assert console.find("pre-release train lookup failed")


def test_all_sources_empty_yields_zero() -> None:
    backend = MemoryBackend()
    console = MockConsole()
    result = resolve_build_number(backend, _release(), APP_ID, console=console)
    assert result == BuildNumber.ZERO
    assert console.find("No build found for 1.0.1")


def test_all_sources_failing_yields_zero_without_error() -> None:
    backend = MemoryBackend()
    backend.fail("resolve_build_for_release", _API_DOWN)
    backend.fail("list_pre_release_trains", _API_DOWN)
    backend.fail("list_builds", _API_DOWN)
    console = MockConsole()

    result = resolve_build_number(backend, _release(), APP_ID, console=console)

    assert result == BuildNumber.ZERO
    assert len(console.find("lookup failed")) == 3


def test_complete_release_attaches_build() -> None:
    backend = MemoryBackend()
    backend.release_builds["rel-1"] = BuildNumber(21)
    original = _release()
    completed = complete_release(backend, original, APP_ID, console=MockConsole())
    assert completed.build_number == BuildNumber(21)
    assert original.build_number == BuildNumber.ZERO


def test_app_max_build_spans_all_versions() -> None:
    backend = MemoryBackend()
    backend.add_build(APP_ID, _build(3), version="1.0.0")
    backend.add_build(APP_ID, _build(30), version="1.0.2")
    backend.add_build(APP_ID, _build(12), version="1.0.1")
    assert resolve_app_max_build(backend, APP_ID, console=MockConsole()) == BuildNumber(30)


def test_app_max_build_failure_is_zero() -> None:
    backend = MemoryBackend()
    backend.fail("list_builds", _API_DOWN)
    console = MockConsole()
    assert resolve_app_max_build(backend, APP_ID, console=console) == BuildNumber.ZERO
    assert console.has_warning()
