"""
Service layer for reltag.

Contains logic that coordinates the pure version functions with git:
- PrereleaseService: Read tags, derive, create and push prerelease tags

Services are the primary API for commands to use.
"""

from .tag_service import PrereleaseService, PrereleaseOptions, PrereleaseResult

__all__ = [
    'PrereleaseService',
    'PrereleaseOptions',
    'PrereleaseResult',
]
