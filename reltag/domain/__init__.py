"""
Domain layer for reltag.

Contains pure value objects with no I/O or side effects:
- SemVer: Parsed semantic version with precedence ordering
"""

from .semver import SemVer, valid, is_valid, compare

__all__ = [
    'SemVer',
    'valid',
    'is_valid',
    'compare',
]
