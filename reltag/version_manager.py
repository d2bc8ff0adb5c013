"""
Manifest version access for the package types reltag publishes.

Reads the release version a prerelease is derived from and writes back
the resolved version before publishing:
- Node.js (semver): package.json
- Python (PEP 440): pyproject.toml [project] or [tool.poetry]
"""

import json
import logging
import toml
from pathlib import Path
from typing import Optional
from packaging.version import Version, InvalidVersion

from .domain.semver import SemVer, is_valid

logger = logging.getLogger(__name__)


class NodeVersionManager:
    """Manage Node.js package versions."""

    manifest = "package.json"

    @staticmethod
    def get_version(repo_path: str) -> Optional[str]:
        """Get current version from package.json."""
        package_json = Path(repo_path) / NodeVersionManager.manifest
        if package_json.exists():
            try:
                data = json.loads(package_json.read_text(encoding='utf-8'))
                version = data.get('version')
                return version or None
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Could not read {package_json}: {e}")
        return None

    @staticmethod
    def set_version(repo_path: str, new_version: str) -> bool:
        """Set version in package.json (like ``npm version --no-git-tag-version``)."""
        package_json = Path(repo_path) / NodeVersionManager.manifest
        if package_json.exists():
            try:
                data = json.loads(package_json.read_text(encoding='utf-8'))
                data['version'] = new_version
                with open(package_json, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.write('\n')  # Add trailing newline
                return True
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Could not update {package_json}: {e}")
        return False


class PythonVersionManager:
    """Manage Python package versions."""

    manifest = "pyproject.toml"

    @staticmethod
    def _load(repo_path: str) -> Optional[dict]:
        pyproject = Path(repo_path) / PythonVersionManager.manifest
        if not pyproject.exists():
            return None
        try:
            return toml.load(pyproject)
        except (toml.TomlDecodeError, OSError) as e:
            logger.warning(f"Could not read {pyproject}: {e}")
            return None

    @staticmethod
    def get_version(repo_path: str) -> Optional[str]:
        """
        Get the release part of the version in pyproject.toml.

        PEP 440 pre/post/dev segments are dropped so ``1.2.0rc1`` reads as
        ``1.2.0``; versions with fewer than three release components are
        padded (``1.2`` -> ``1.2.0``).
        """
        data = PythonVersionManager._load(repo_path)
        if not data:
            return None

        version = data.get('project', {}).get('version')
        if version is None:
            version = data.get('tool', {}).get('poetry', {}).get('version')
        if not version:
            return None

        try:
            v = Version(version)
        except InvalidVersion:
            logger.warning(f"Ignoring invalid PEP 440 version in pyproject.toml: {version}")
            return None
        return f"{v.major}.{v.minor}.{v.micro}"

    @staticmethod
    def set_version(repo_path: str, new_version: str) -> bool:
        """
        Set version in pyproject.toml.

        Semver prereleases are written as a PEP 440 local version
        (``2.1.1-main.0`` -> ``2.1.1+main.0``) so the manifest stays
        installable and still reads back as ``2.1.1``.
        """
        pyproject = Path(repo_path) / PythonVersionManager.manifest
        data = PythonVersionManager._load(repo_path)
        if not data:
            return False

        try:
            version = to_pep440(new_version)
        except InvalidVersion:
            logger.warning(f"Cannot express {new_version} as a PEP 440 version")
            return False

        if 'version' in data.get('project', {}):
            data['project']['version'] = version
        elif 'version' in data.get('tool', {}).get('poetry', {}):
            data['tool']['poetry']['version'] = version
        else:
            return False

        with open(pyproject, 'w') as f:
            toml.dump(data, f)
        return True


def to_pep440(version: str) -> str:
    """
    Convert a version to canonical PEP 440.

    A semver prerelease and build become the local segment, e.g.
    ``2.1.1-branch-feature.4`` -> ``2.1.1+branch.feature.4``. Anything
    else must already be a PEP 440 version.

    Raises:
        InvalidVersion: if the result is not a valid PEP 440 version
    """
    if is_valid(version):
        parsed = SemVer.parse(version)
        local = '.'.join(str(p) for p in parsed.prerelease + parsed.build)
        version = f"{parsed.release}+{local}" if local else parsed.release
    return str(Version(version))


# Version manager registry, in detection order
VERSION_MANAGERS = {
    'node': NodeVersionManager,
    'python': PythonVersionManager,
}


def detect_project_type(repo_path: str) -> Optional[str]:
    """Return the first project type whose manifest exists in ``repo_path``."""
    for project_type, manager in VERSION_MANAGERS.items():
        if (Path(repo_path) / manager.manifest).exists():
            return project_type
    return None


def get_version(repo_path: str, project_type: Optional[str] = None) -> Optional[str]:
    """Get current version for a project type (detected when not given)."""
    project_type = project_type or detect_project_type(repo_path)
    manager = VERSION_MANAGERS.get(project_type)
    if manager:
        return manager.get_version(repo_path)
    return None


def set_version(repo_path: str, new_version: str, project_type: Optional[str] = None) -> bool:
    """Set version for a project type (detected when not given)."""
    project_type = project_type or detect_project_type(repo_path)
    manager = VERSION_MANAGERS.get(project_type)
    if manager:
        return manager.set_version(repo_path, new_version)
    return False
