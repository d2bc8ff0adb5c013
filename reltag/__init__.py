"""
reltag - Prerelease version tags for CI builds.

reltag computes the next unused semantic-version prerelease tag for a
branch from the tags a repository already has, so every push build can
be published under its own version.

Quick Start:
    import reltag

    reltag.next_prerelease_tag(
        branch="main",
        default_branch="main",
        next_release_version="2.1.1",
        tags=["2.1.1-main.0", "2.1.1-main.2"],
    )
    # -> "2.1.1-main.3"

    reltag.sanitize_ref("feature/big_change@home")
    # -> "feature-big-changehome"

    # Read tags from git, create and push the next tag
    from reltag.services import PrereleaseService, PrereleaseOptions
    PrereleaseService().resolve(".", PrereleaseOptions(push=True))

Qualifier schemes:
    branch-qualified (default): main -> 2.1.1-main.N, feature -> 2.1.1-branch-feature.N
    simple:                     main -> 2.1.1-N,      feature -> 2.1.1-feature.N
"""

__version__ = "0.3.0"

# Core version functions
from .refs import sanitize_ref
from .prerelease import (
    QualifierScheme,
    next_prerelease_tag,
    prerelease_qualifier,
    matching_prerelease_tags,
)
from .dist_tags import ref_to_dist_tag, publish_dist_tag, additional_dist_tags
from .release import resolve_publish_version, release_version_from_tag

# Domain objects
from .domain import SemVer

# Errors
from .errors import (
    ReltagError,
    InvariantViolation,
    AlreadyReleasedError,
    InvalidVersionError,
    GitError,
    TagConflictError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    "sanitize_ref",
    "QualifierScheme",
    "next_prerelease_tag",
    "prerelease_qualifier",
    "matching_prerelease_tags",
    "ref_to_dist_tag",
    "publish_dist_tag",
    "additional_dist_tags",
    "resolve_publish_version",
    "release_version_from_tag",
    "SemVer",
    "ReltagError",
    "InvariantViolation",
    "AlreadyReleasedError",
    "InvalidVersionError",
    "GitError",
    "TagConflictError",
    "load_config",
    "save_config",
]
