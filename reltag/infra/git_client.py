"""
Git access for reltag.

Every git invocation the tag service makes goes through ``GitClient``:
tag listing (local or ``ls-remote``), branch discovery, and creating,
pushing and deleting a single tag. Commands run without a shell and
with a timeout, and failures surface as ``GitError``.
"""

import subprocess
from typing import Optional, List, Tuple
import logging

from ..errors import GitError, TagConflictError

logger = logging.getLogger(__name__)

# Phrases git prints when a pushed tag is already on the remote
_CONFLICT_MARKERS = ("already exists",)


class GitClient:
    """
    Runs git in a repository directory.

    Example:
        git = GitClient(timeout=10)
        tags = git.list_tags("/path/to/repo", remote="origin")
        git.create_tag("/path/to/repo", "1.2.0-main.0")
    """

    def __init__(self, timeout: int = 30):
        # Seconds before a git command is abandoned
        self.timeout = timeout

    def _run(
        self,
        args: List[str],
        cwd: str,
        check: bool = False
    ) -> Tuple[Optional[str], int, str]:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory
            check: Raise GitError on non-zero exit

        Returns:
            Tuple of (stdout, returncode, stderr)
        """
        cmd = ['git'] + args
        cmd_str = ' '.join(cmd)
        logger.debug(f"Running in '{cwd}': {cmd_str}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {cmd_str}")
            if check:
                raise GitError(cmd_str, -1, "timed out")
            return None, -1, "timed out"
        except FileNotFoundError as e:
            raise GitError(cmd_str, -1, str(e)) from e

        if check and result.returncode != 0:
            raise GitError(cmd_str, result.returncode, result.stderr)

        output = result.stdout.strip() if result.stdout else None
        return output, result.returncode, result.stderr or ""

    def list_tags(self, path: str, remote: Optional[str] = None) -> List[str]:
        """
        List tag names.

        Args:
            path: Path to git repository
            remote: Read tags from this remote (``git ls-remote``) instead
                of the local repository

        Returns:
            Tag names, in git's order, without duplicates
        """
        if remote:
            output, _, _ = self._run(['ls-remote', '--tags', remote], cwd=path, check=True)
            return parse_ls_remote_tags(output or "")

        output, _, _ = self._run(['tag', '--list'], cwd=path, check=True)
        if not output:
            return []
        return [line.strip() for line in output.split('\n') if line.strip()]

    def current_branch(self, path: str) -> Optional[str]:
        """Get current branch name, or None for a detached HEAD."""
        output, code, _ = self._run(['rev-parse', '--abbrev-ref', 'HEAD'], cwd=path)
        if code == 0 and output and output != 'HEAD':
            return output.strip()
        return None

    def default_branch(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get the remote's default branch from ``refs/remotes/<remote>/HEAD``.

        Returns:
            Branch name, or None when the remote HEAD is unknown
        """
        output, code, _ = self._run(
            ['symbolic-ref', '--short', f'refs/remotes/{remote}/HEAD'],
            cwd=path
        )
        if code == 0 and output:
            prefix = f"{remote}/"
            return output[len(prefix):] if output.startswith(prefix) else output
        return None

    def create_tag(self, path: str, tag: str, message: Optional[str] = None) -> None:
        """Create an annotated tag at HEAD."""
        self._run(['tag', '-a', '-m', message or f"Version {tag}", tag], cwd=path, check=True)

    def delete_tag(self, path: str, tag: str) -> None:
        """Delete a local tag."""
        self._run(['tag', '-d', tag], cwd=path, check=True)

    def push_tag(self, path: str, tag: str, remote: str = "origin") -> None:
        """
        Push a single tag.

        Raises:
            TagConflictError: if the remote already has the tag
            GitError: for any other failure
        """
        args = ['push', remote, f'refs/tags/{tag}']
        _, code, stderr = self._run(args, cwd=path)
        if code == 0:
            return
        cmd_str = ' '.join(['git'] + args)
        if any(marker in stderr for marker in _CONFLICT_MARKERS):
            raise TagConflictError(tag, cmd_str, code, stderr)
        raise GitError(cmd_str, code, stderr)

    def fetch_tags(self, path: str, remote: str = "origin") -> None:
        """Fetch all tags from a remote."""
        self._run(['fetch', '--tags', '--force', remote], cwd=path, check=True)


def parse_ls_remote_tags(output: str) -> List[str]:
    """
    Extract tag names from ``git ls-remote --tags`` output.

    Peeled entries (``refs/tags/v1^{}``) are folded into their tag.
    """
    tags: List[str] = []
    for line in output.split('\n'):
        parts = line.strip().split('\t')
        if len(parts) != 2 or not parts[1].startswith('refs/tags/'):
            continue
        name = parts[1][len('refs/tags/'):]
        if name.endswith('^{}'):
            name = name[:-3]
        if name not in tags:
            tags.append(name)
    return tags
