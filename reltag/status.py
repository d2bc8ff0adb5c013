"""
Status message helpers.

Markdown snippets used when reporting a step result back to a check run
or chat channel.
"""

from typing import Optional


def spawn_failure(command: str, stdout: Optional[str] = None, stderr: Optional[str] = None) -> str:
    """Create a message from a failed command, preferring stderr over stdout."""
    output = (stderr or stdout or "").strip()
    return (
        "Failed to run command:\n\n"
        "```\n"
        f"$ {command}\n"
        f"{output}\n"
        "```\n"
    )


def status_reason(
    reason: str,
    owner: Optional[str] = None,
    name: Optional[str] = None,
    sha: Optional[str] = None,
    url: Optional[str] = None
) -> str:
    """
    Append the repository slug to a status reason.

    Examples:
        status_reason("Build passed", "hart", "grant")
        # -> "Build passed on hart/grant"
        status_reason("Build passed", "hart", "grant", "abcdef0123", "https://...")
        # -> "Build passed on [hart/grant#abcdef0](https://...)"
    """
    if not (owner and name):
        return reason

    slug = f"{owner}/{name}"
    if sha:
        slug += f"#{sha[:7]}"
    if url:
        slug = f"[{slug}]({url})"
    return f"{reason} on {slug}"
