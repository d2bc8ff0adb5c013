"""
Prerelease tag service for reltag.

Reads a repository's tags, derives the next prerelease tag for a branch
and optionally creates and pushes it. Two CI runs can compute the same
tag at the same time; the loser's push is rejected, so the whole
read-compute-push cycle is retried with a randomized delay.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..config import load_config
from ..errors import TagConflictError
from ..infra.git_client import GitClient
from ..prerelease import QualifierScheme, next_prerelease_tag
from ..release import next_release_version
from ..version_manager import get_version

logger = logging.getLogger(__name__)


@dataclass
class PrereleaseOptions:
    """Options for resolving a prerelease tag."""
    branch: Optional[str] = None            # Current branch if None
    default_branch: Optional[str] = None    # Remote HEAD, then config if None
    release_version: Optional[str] = None   # Manifest version if None
    tags: Optional[List[str]] = None        # Read from git if None
    scheme: Optional[str] = None            # Config if None
    remote: Optional[str] = None            # Config if None
    use_remote_tags: Optional[bool] = None  # Config if None
    create: bool = False
    push: bool = False


@dataclass
class PrereleaseResult:
    """Outcome of a prerelease tag resolution."""
    tag: str
    branch: str
    default_branch: str
    release_version: str
    scheme: str
    created: bool = False
    pushed: bool = False
    attempts: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tag': self.tag,
            'branch': self.branch,
            'default_branch': self.default_branch,
            'release_version': self.release_version,
            'scheme': self.scheme,
            'created': self.created,
            'pushed': self.pushed,
            'attempts': self.attempts,
        }


class PrereleaseService:
    """
    Service that turns repository state into the next prerelease tag.

    Example:
        service = PrereleaseService()
        result = service.resolve("/path/to/repo", PrereleaseOptions(push=True))
        print(result.tag)  # "1.4.0-main.7"
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize PrereleaseService.

        Args:
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)
            sleep: Delay function used between retries
            rng: Random source for retry jitter
        """
        self.config = config or load_config()
        self.git = git_client or GitClient(
            timeout=int(self.config.get('git', {}).get('timeout_seconds', 30))
        )
        self.sleep = sleep
        self.rng = rng or random.Random()

    def _setting(self, section: str, key: str, override: Any = None) -> Any:
        if override is not None:
            return override
        return self.config.get(section, {}).get(key)

    def release_version(
        self,
        path: str,
        override: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> str:
        """
        Release version from the override or the manifest.

        Without either, the patch after the highest release tag, then the
        configured fallback.
        """
        fallback = self._setting('versioning', 'fallback_version') or "0.1.0"
        return next_release_version(override or get_version(path), fallback, tags)

    def resolve_branches(self, path: str, options: PrereleaseOptions) -> tuple:
        """Return (branch, default_branch) for the build."""
        branch = options.branch or self.git.current_branch(path)
        if not branch:
            raise ValueError("Cannot determine branch (detached HEAD?); pass it explicitly")

        remote = self._setting('git', 'remote', options.remote) or "origin"
        default_branch = (
            options.default_branch
            or self.git.default_branch(path, remote)
            or self._setting('versioning', 'default_branch')
            or "main"
        )
        return branch, default_branch

    def read_tags(self, path: str, options: PrereleaseOptions) -> List[str]:
        """Tags from the options, the remote, or the local repository."""
        if options.tags is not None:
            return list(options.tags)
        remote = self._setting('git', 'remote', options.remote) or "origin"
        if self._setting('git', 'use_remote_tags', options.use_remote_tags):
            return self.git.list_tags(path, remote=remote)
        return self.git.list_tags(path)

    def compute(
        self,
        path: str,
        options: PrereleaseOptions,
        extra_tags: Optional[List[str]] = None
    ) -> PrereleaseResult:
        """Derive the next prerelease tag without touching the repository."""
        branch, default_branch = self.resolve_branches(path, options)
        tags = self.read_tags(path, options) + list(extra_tags or [])
        release = self.release_version(path, options.release_version, tags)
        scheme = QualifierScheme.parse(
            self._setting('versioning', 'qualifier_scheme', options.scheme) or "branch-qualified"
        )

        tag = next_prerelease_tag(
            branch=branch,
            default_branch=default_branch,
            next_release_version=release,
            tags=tags,
            scheme=scheme,
        )
        logger.debug(f"Next prerelease tag for {branch} ({release}): {tag}")
        return PrereleaseResult(
            tag=tag,
            branch=branch,
            default_branch=default_branch,
            release_version=release,
            scheme=scheme.value,
        )

    def resolve(self, path: str, options: Optional[PrereleaseOptions] = None) -> PrereleaseResult:
        """
        Derive the next prerelease tag and create/push it when requested.

        A rejected push deletes the local tag, re-reads the tags and tries
        again, up to ``retry.retries`` times.

        Raises:
            AlreadyReleasedError: the release version is already tagged (never retried)
            TagConflictError: the push still conflicted after all retries
            GitError: any other git failure
        """
        options = options or PrereleaseOptions()
        if not (options.create or options.push):
            return self.compute(path, options)

        retry = self.config.get('retry', {})
        retries = int(retry.get('retries', 5))
        min_delay = float(retry.get('min_delay_seconds', 1.0))
        max_delay = float(retry.get('max_delay_seconds', 2.5))
        remote = self._setting('git', 'remote', options.remote) or "origin"

        attempt = 0
        conflicts: List[str] = []
        while True:
            attempt += 1
            result = self.compute(path, options, conflicts)
            result.attempts = attempt

            self.git.create_tag(path, result.tag)
            result.created = True
            if not options.push:
                return result

            try:
                self.git.push_tag(path, result.tag, remote)
            except TagConflictError:
                self.git.delete_tag(path, result.tag)
                conflicts.append(result.tag)
                if attempt > retries:
                    raise
                delay = self.rng.uniform(min_delay, max_delay)
                logger.info(
                    f"Tag {result.tag} already exists on {remote}, retrying in {delay:.1f}s "
                    f"(attempt {attempt} of {retries + 1})"
                )
                self.sleep(delay)
                if options.tags is None:
                    self.git.fetch_tags(path, remote)
                continue

            result.pushed = True
            logger.info(f"Pushed tag {result.tag} to {remote}")
            return result
