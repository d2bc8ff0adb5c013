"""
Prerelease tag derivation.

Given the version about to be released and every tag the repository
already has, work out the next unused prerelease tag for a branch:

    next_prerelease_tag(
        branch="feature/login",
        default_branch="main",
        next_release_version="2.1.1",
        tags=["2.1.0", "2.1.1-branch-feature-login.0"],
    )
    # -> "2.1.1-branch-feature-login.1"

Everything here is pure; reading tags and pushing the result is up to the
caller (see ``reltag.services.tag_service``).
"""

import re
from enum import Enum
from typing import Iterable, List, Optional, Union

from .domain.semver import SemVer, is_valid
from .errors import AlreadyReleasedError
from .refs import sanitize_ref


class QualifierScheme(Enum):
    """How the branch name turns into a prerelease qualifier."""
    # main -> 2.1.1-main.N, feature -> 2.1.1-branch-feature.N
    BRANCH_QUALIFIED = "branch-qualified"
    # main -> 2.1.1-N, feature -> 2.1.1-feature.N
    SIMPLE = "simple"

    @classmethod
    def parse(cls, value: Union[str, 'QualifierScheme']) -> 'QualifierScheme':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown qualifier scheme {value!r} (expected one of: {choices})") from None


DEFAULT_SCHEME = QualifierScheme.BRANCH_QUALIFIED


def prerelease_qualifier(
    branch: str,
    default_branch: str,
    scheme: QualifierScheme = DEFAULT_SCHEME
) -> str:
    """
    Compute the qualifier that namespaces a branch's prereleases.

    Returns:
        Qualifier string, empty for the default branch under the simple scheme
    """
    cleaned = sanitize_ref(branch)
    on_default = branch == default_branch

    if scheme is QualifierScheme.SIMPLE:
        return "" if on_default else cleaned
    return cleaned if on_default else f"branch-{cleaned}"


def _format_first(version: str, qualifier: str) -> str:
    if qualifier:
        return f"{version}-{qualifier}.0"
    return f"{version}-0"


def _prerelease_pattern(version: str, qualifier: str) -> re.Pattern:
    counter = r"(?:0|[1-9][0-9]*)"
    if qualifier:
        return re.compile(rf"{re.escape(version)}-{re.escape(qualifier)}\.{counter}")
    return re.compile(rf"{re.escape(version)}-{counter}")


def matching_prerelease_tags(
    branch: str,
    default_branch: str,
    next_release_version: str,
    tags: Iterable[str],
    scheme: QualifierScheme = DEFAULT_SCHEME
) -> List[str]:
    """
    Return the tags in ``branch``'s prerelease lineage for a release,
    highest first.
    """
    qualifier = prerelease_qualifier(branch, default_branch, scheme)
    pattern = _prerelease_pattern(next_release_version, qualifier)
    matching = [t for t in tags if is_valid(t) and pattern.fullmatch(t)]
    return sorted(set(matching), key=lambda t: SemVer.parse(t).precedence_key(), reverse=True)


def next_prerelease_tag(
    branch: str,
    default_branch: str,
    next_release_version: str,
    tags: Iterable[str],
    scheme: Optional[Union[str, QualifierScheme]] = None
) -> str:
    """
    Return the next prerelease semantic version tag for a branch.

    Args:
        branch: Branch being built
        default_branch: Repository default branch
        next_release_version: Version of the upcoming release, e.g. "2.1.1"
        tags: Every existing tag; non-semver entries are ignored
        scheme: Qualifier scheme (defaults to branch-qualified)

    Returns:
        Prerelease tag such as "2.1.1-main.3" or "2.1.1-branch-feature.0"

    Raises:
        AlreadyReleasedError: if ``next_release_version`` is already tagged
    """
    scheme = DEFAULT_SCHEME if scheme is None else QualifierScheme.parse(scheme)
    tags = list(tags)

    if next_release_version in tags:
        raise AlreadyReleasedError(next_release_version)

    matching = matching_prerelease_tags(branch, default_branch, next_release_version, tags, scheme)
    if not matching:
        qualifier = prerelease_qualifier(branch, default_branch, scheme)
        return _format_first(next_release_version, qualifier)

    return str(SemVer.parse(matching[0]).bump_prerelease())
