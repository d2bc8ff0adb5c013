"""
Git ref normalization for reltag.

Branch and tag names may contain characters that are not allowed in a
semver prerelease identifier or a registry dist-tag, e.g.:
  - feature/login      -> feature-login
  - fix_typo           -> fix-typo
  - big/changes@home   -> big-changeshome
"""

import re

_SEPARATORS_RE = re.compile(r"[/_]")
_DISALLOWED_RE = re.compile(r"[^0-9A-Za-z.-]")
_DOTS_RE = re.compile(r"\.+")


def sanitize_ref(ref: str) -> str:
    """
    Remove characters that are not valid in a semver prerelease identifier.

    ``/`` and ``_`` become ``-``, anything outside ``[0-9A-Za-z.-]`` is
    dropped and runs of ``.`` collapse to one. Idempotent.

    Args:
        ref: Branch or tag name

    Returns:
        Sanitized ref (empty string for an empty ref)
    """
    cleaned = _SEPARATORS_RE.sub("-", ref)
    cleaned = _DISALLOWED_RE.sub("", cleaned)
    return _DOTS_RE.sub(".", cleaned)
