"""
Infrastructure layer for reltag.

Contains abstractions for external systems:
- GitClient: Git command execution

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, parse_ls_remote_tags

__all__ = [
    'GitClient',
    'parse_ls_remote_tags',
]
