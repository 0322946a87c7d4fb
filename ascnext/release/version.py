from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Literal

from ascnext.core.result import Err, Ok, Result
from ascnext.release.errors import ReleaseError

VersionBump = Literal["major", "minor", "patch"]

VERSION_BUMPS: tuple[VersionBump, ...] = ("major", "minor", "patch")

_VERSION_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")
_DIGITS_RE = re.compile(r"[0-9]+")


def _is_plain_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """Marketing version ``major.minor.patch`` as shown on the store."""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            value: object = getattr(self, name)
            if not _is_plain_int(value):
                raise ValueError(f"version {name} must be an integer, got {value!r}")
            if value < 0:  # type: ignore[operator]
                raise ValueError(f"version {name} must be non-negative, got {value}")

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``X.Y.Z``.

        Raises:
            ValueError: If ``text`` is not three dot-separated digit groups.
        """
        if not isinstance(text, str):
            raise ValueError(f"version must be a string, got {text!r}")
        m = _VERSION_RE.fullmatch(text.strip())
        if m is None:
            raise ValueError(f'version must be in format X.Y.Z (e.g. 1.0.0), got: "{text.strip()}"')
        return cls(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def increment_patch(self) -> Version:
        return Version(self.major, self.minor, self.patch + 1)

    def increment_minor(self) -> Version:
        return Version(self.major, self.minor + 1, 0)

    def increment_major(self) -> Version:
        return Version(self.major + 1, 0, 0)

    def bump(self, kind: VersionBump) -> Version:
        match kind:
            case "major":
                return self.increment_major()
            case "minor":
                return self.increment_minor()
            case "patch":
                return self.increment_patch()
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")

    def compare_to(self, other: Version) -> int:
        """Negative if self < other, 0 if equal, positive if self > other."""
        if not isinstance(other, Version):
            raise TypeError(f"can only compare with Version, got {type(other).__name__}")
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if mine != theirs:
                return mine - theirs
        return 0

    def is_greater_than(self, other: Version) -> bool:
        return self.compare_to(other) > 0

    def is_less_than(self, other: Version) -> bool:
        return self.compare_to(other) < 0


@dataclass(frozen=True, slots=True, order=True)
class BuildNumber:
    """Build counter (``CFBundleVersion``). Zero means no build known yet."""

    value: int

    ZERO: ClassVar[BuildNumber]

    def __post_init__(self) -> None:
        if not _is_plain_int(self.value):
            raise ValueError(f"build number must be a non-negative integer, got {self.value!r}")
        if self.value < 0:
            raise ValueError(f"build number must be a non-negative integer, got {self.value}")

    @classmethod
    def parse(cls, raw: str | int) -> BuildNumber:
        """Build from an int or an all-digit string.

        Raises:
            ValueError: For signs, decimals, blanks or anything non-numeric.
        """
        if isinstance(raw, str):
            if not _DIGITS_RE.fullmatch(raw):
                raise ValueError(f"build number must be a non-negative integer, got {raw!r}")
            return cls(int(raw))
        return cls(raw)

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    def is_zero(self) -> bool:
        return self.value == 0

    def increment(self, by: int = 1) -> BuildNumber:
        if not _is_plain_int(by) or by < 0:
            raise ValueError(f"increment must be a non-negative integer, got {by!r}")
        return BuildNumber(self.value + by)

    def compare_to(self, other: BuildNumber) -> int:
        if not isinstance(other, BuildNumber):
            raise TypeError(f"can only compare with BuildNumber, got {type(other).__name__}")
        return self.value - other.value

    def is_greater_than(self, other: BuildNumber) -> bool:
        return self.compare_to(other) > 0


BuildNumber.ZERO = BuildNumber(0)


def parse_version(text: str) -> Result[Version, ReleaseError]:
    try:
        return Ok(Version.parse(text))
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="validation",
                message=str(e),
                hint="Expected: MAJOR.MINOR.PATCH",
                reason="version",
            )
        )


def parse_build_number(raw: str | int) -> Result[BuildNumber, ReleaseError]:
    try:
        return Ok(BuildNumber.parse(raw))
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="validation",
                message=str(e),
                hint="Build numbers are plain non-negative integers",
                reason="build_number",
            )
        )
