"""
Semantic version domain object for reltag.

Parses and orders versions following Semantic Versioning 2.0.0 with the
same strictness as npm's ``semver.valid``: an optional leading ``v`` and
surrounding whitespace are accepted, everything else must be canonical.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..errors import InvalidVersionError

MAX_LENGTH = 256
MAX_SAFE_INTEGER = 2 ** 53 - 1

_NUMERIC = r"0|[1-9]\d*"
_PRERELEASE_ID = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"

SEMVER_RE = re.compile(
    rf"^v?(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?$",
    re.ASCII
)

Identifier = Union[int, str]


def _identifier(part: str) -> Identifier:
    return int(part) if part.isdigit() else part


@dataclass(frozen=True)
class SemVer:
    """
    Immutable semantic version.

    Examples:
        SemVer.parse("2.1.1-main.3")     -> SemVer(2, 1, 1, ('main', 3))
        SemVer.parse("v1.0.0+build.5")   -> SemVer(1, 0, 0, (), ('build', '5'))

    Prerelease identifiers that are all digits are stored as ints so they
    compare numerically.
    """

    major: int
    minor: int
    patch: int
    prerelease: Tuple[Identifier, ...] = ()
    build: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, version: str) -> 'SemVer':
        """
        Parse a version string.

        Raises:
            InvalidVersionError: if the string is not a valid semantic version
        """
        if not isinstance(version, str) or len(version) > MAX_LENGTH:
            raise InvalidVersionError(str(version))

        match = SEMVER_RE.match(version.strip())
        if not match:
            raise InvalidVersionError(version)

        major = int(match.group('major'))
        minor = int(match.group('minor'))
        patch = int(match.group('patch'))
        if max(major, minor, patch) > MAX_SAFE_INTEGER:
            raise InvalidVersionError(version)

        prerelease = match.group('prerelease')
        build = match.group('build')
        return cls(
            major=major,
            minor=minor,
            patch=patch,
            prerelease=tuple(_identifier(p) for p in prerelease.split('.')) if prerelease else (),
            build=tuple(build.split('.')) if build else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def release(self) -> str:
        """The ``major.minor.patch`` part."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def precedence_key(self) -> tuple:
        """
        Sort key implementing semver precedence.

        Build metadata is ignored. A release sorts above all of its
        prereleases; numeric identifiers sort below alphanumeric ones; a
        longer identifier list wins when all shared identifiers are equal.
        """
        if not self.prerelease:
            pre = (1,)
        else:
            pre = (0, tuple(
                (0, p, '') if isinstance(p, int) else (1, 0, p)
                for p in self.prerelease
            ))
        return (self.major, self.minor, self.patch, pre)

    def bump_prerelease(self) -> 'SemVer':
        """
        Return the next prerelease version.

        Without a prerelease the patch is bumped and the prerelease set to
        ``0``. Otherwise the right-most numeric identifier is incremented,
        or ``0`` appended when none is numeric. Build metadata is dropped.
        """
        if not self.prerelease:
            return SemVer(self.major, self.minor, self.patch + 1, (0,))

        parts = list(self.prerelease)
        for i in range(len(parts) - 1, -1, -1):
            if isinstance(parts[i], int):
                parts[i] += 1
                break
        else:
            parts.append(0)
        return SemVer(self.major, self.minor, self.patch, tuple(parts))

    def __lt__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __le__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.precedence_key() <= other.precedence_key()

    def __gt__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.precedence_key() > other.precedence_key()

    def __ge__(self, other: 'SemVer') -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.precedence_key() >= other.precedence_key()

    def __str__(self) -> str:
        version = self.release
        if self.prerelease:
            version += '-' + '.'.join(str(p) for p in self.prerelease)
        if self.build:
            version += '+' + '.'.join(self.build)
        return version

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'version': str(self),
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'prerelease': list(self.prerelease),
            'build': list(self.build),
        }


def valid(version: str) -> Optional[str]:
    """Return the canonical form of ``version``, or None if it is not valid."""
    try:
        return str(SemVer.parse(version))
    except InvalidVersionError:
        return None


def is_valid(version: str) -> bool:
    """Check whether ``version`` is a valid semantic version."""
    return valid(version) is not None


def compare(a: str, b: str) -> int:
    """Compare two version strings by precedence, returning -1, 0 or 1."""
    key_a = SemVer.parse(a).precedence_key()
    key_b = SemVer.parse(b).precedence_key()
    return (key_a > key_b) - (key_a < key_b)
