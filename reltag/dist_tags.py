"""
Registry dist-tag naming.

Branch builds are published under ``branch-<ref>`` so they never move the
registry's ``latest`` label; release tags publish without a dist-tag.
"""

from typing import Iterable, List, Optional

from .domain.semver import SemVer, valid
from .refs import sanitize_ref

DEFAULT_BRANCH_PREFIX = "branch"
DEFAULT_BRANCH_DIST_TAGS = ("next",)


def ref_to_dist_tag(ref: str, prefix: str = DEFAULT_BRANCH_PREFIX) -> str:
    """Return the sanitized ref prepended with ``prefix-``."""
    return f"{prefix}-{sanitize_ref(ref)}"


def strip_v(tag: str) -> str:
    """Drop a single leading ``v`` from a tag name."""
    return tag[1:] if tag.startswith('v') else tag


def publish_dist_tag(
    branch: Optional[str] = None,
    tag: Optional[str] = None,
    prefix: str = DEFAULT_BRANCH_PREFIX
) -> Optional[str]:
    """
    Return the dist-tag to publish a build under.

    Args:
        branch: Branch of a push build
        tag: Git tag of a tag build (used when no branch is given)
        prefix: Prefix for branch dist-tags

    Returns:
        Dist-tag name, or None when the registry default should apply
        (tag builds of a plain release version)
    """
    if branch:
        return ref_to_dist_tag(branch, prefix)
    if not tag:
        return None

    version = valid(strip_v(tag))
    if version is None or SemVer.parse(version).is_prerelease:
        return sanitize_ref(tag)
    return None


def additional_dist_tags(
    configured: Optional[Iterable[str]],
    branch: Optional[str],
    default_branch: Optional[str],
    default_branch_tags: Iterable[str] = DEFAULT_BRANCH_DIST_TAGS
) -> List[str]:
    """
    Dist-tags to add after publishing.

    Configured tags come first; builds of the default branch also get
    ``default_branch_tags`` (``next``). Duplicates are dropped.
    """
    result: List[str] = []
    extra = list(default_branch_tags) if branch and branch == default_branch else []
    for name in list(configured or []) + extra:
        if name and name not in result:
            result.append(name)
    return result
