"""
Version resolution for publishing.

Ties the pieces together for the two kinds of CI events:
- tag builds publish the tag's own version (or a ``gtag-`` prerelease of
  the manifest version when the tag is not a semver)
- push builds publish the next prerelease tag of the branch
"""

from typing import Iterable, Optional, Union

from .dist_tags import ref_to_dist_tag, strip_v
from .domain.semver import SemVer, valid
from .prerelease import QualifierScheme, next_prerelease_tag

DEFAULT_FALLBACK_VERSION = "0.1.0"
TAG_DIST_TAG_PREFIX = "gtag"


def next_patch_version(tags: Iterable[str]) -> Optional[str]:
    """
    Patch bump of the highest release tag, e.g. ``2.4.2`` after ``v2.4.1``.

    Prerelease and non-semver tags are ignored; None without any release tag.
    """
    releases = [SemVer.parse(v) for v in (valid(strip_v(t)) for t in tags) if v]
    releases = [v for v in releases if not v.is_prerelease]
    if not releases:
        return None
    highest = max(releases)
    return f"{highest.major}.{highest.minor}.{highest.patch + 1}"


def next_release_version(
    manifest_version: Optional[str],
    fallback: str = DEFAULT_FALLBACK_VERSION,
    tags: Optional[Iterable[str]] = None
) -> str:
    """
    Return the manifest version when set.

    Otherwise the patch after the highest release in ``tags``, and
    ``fallback`` when there is none.
    """
    if manifest_version and manifest_version.strip():
        return manifest_version.strip()
    return next_patch_version(tags or ()) or fallback


def release_version_from_tag(
    tag: str,
    manifest_version: str,
    prefix: str = TAG_DIST_TAG_PREFIX
) -> str:
    """
    Version to publish for a tag build.

    A semver tag (``v`` prefix allowed) is used as is. Any other tag gives
    a prerelease of the manifest version, e.g. ``1.0.0-gtag-nightly``.
    """
    version = valid(strip_v(tag))
    if version:
        return version
    return f"{manifest_version}-{ref_to_dist_tag(tag, prefix)}"


def resolve_publish_version(
    manifest_version: Optional[str],
    tags: Iterable[str] = (),
    branch: Optional[str] = None,
    tag: Optional[str] = None,
    default_branch: str = "main",
    scheme: Optional[Union[str, QualifierScheme]] = None,
    fallback: str = DEFAULT_FALLBACK_VERSION
) -> str:
    """
    Resolve the version to publish for a push or tag build.

    Exactly one of ``branch`` and ``tag`` must be given.

    Raises:
        ValueError: if neither or both of branch and tag are given
        AlreadyReleasedError: for push builds whose release is already tagged
    """
    if bool(branch) == bool(tag):
        raise ValueError("Exactly one of branch or tag must be given")

    tags = list(tags)
    release = next_release_version(manifest_version, fallback, tags)
    if tag:
        return release_version_from_tag(tag, release)

    return next_prerelease_tag(
        branch=branch,
        default_branch=default_branch,
        next_release_version=release,
        tags=tags,
        scheme=scheme,
    )
