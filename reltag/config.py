"""
Configuration for reltag.

Settings come from three layers, later ones winning:

1. built-in defaults (``get_default_config``)
2. a config file: ``$RELTAG_CONFIG`` or ``~/.reltag/config.{json,toml,yaml,yml}``
3. ``RELTAG_<SECTION>_<KEY>`` environment variables,
   e.g. ``RELTAG_VERSIONING_DEFAULT_BRANCH=trunk``
"""

import json
import logging
import os
import sys
import tomllib
from pathlib import Path

import toml
import yaml

from .exit_codes import ConfigError

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger("reltag")

ENV_PREFIX = "RELTAG_"
CONFIG_ENV_VAR = "RELTAG_CONFIG"
CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']
YAML_SUFFIXES = ('.yaml', '.yml')


def get_config_dir():
    return Path.home() / '.reltag'


def get_config_path():
    """Return the config file in use, or the path a new one is saved to.

    ``$RELTAG_CONFIG`` wins when it points at an existing file; otherwise
    the first non-empty ``~/.reltag/config.*`` is used.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit and Path(explicit).exists():
        return Path(explicit)

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        candidate = config_dir / filename
        if candidate.exists() and candidate.stat().st_size > 0:
            return candidate

    return config_dir / CONFIG_FILENAMES[0]


def get_default_config():
    """Built-in settings."""
    return {
        "versioning": {
            "default_branch": "main",
            "qualifier_scheme": "branch-qualified",
            "dist_tag_prefix": "branch",
            "tag_dist_tag_prefix": "gtag",
            "fallback_version": "0.1.0",
            "default_branch_dist_tags": ["next"]
        },
        "git": {
            "remote": "origin",
            "timeout_seconds": 30,
            "use_remote_tags": False
        },
        "retry": {
            "retries": 5,
            "min_delay_seconds": 1.0,
            "max_delay_seconds": 2.5
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def _read_config_file(config_path: Path) -> dict:
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    with open(config_path, 'r') as f:
        if suffix in YAML_SUFFIXES:
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_config():
    """
    Build the effective configuration.

    Raises:
        ConfigError: if the config file cannot be parsed or holds invalid values
    """
    config = get_default_config()
    config_path = get_config_path()

    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        logger.debug(f"Loaded configuration from {config_path}")
        config = merge_configs(config, file_config)

    config = apply_env_overrides(config)
    validate_config(config)
    return config


def save_config(config):
    """Write ``config`` in the format of the config file path; returns that path."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            # tomllib cannot write
            toml.dump(config, f)
        elif suffix in YAML_SUFFIXES:
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)
            f.write('\n')

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def validate_config(config):
    """
    Reject values that would otherwise fail deep inside a command.

    Raises:
        ConfigError: if a value is out of range or unknown
    """
    from .prerelease import QualifierScheme

    scheme = config.get("versioning", {}).get("qualifier_scheme", "branch-qualified")
    try:
        QualifierScheme.parse(scheme)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    retry = config.get("retry", {})
    try:
        retries = int(retry.get("retries", 0))
        min_delay = float(retry.get("min_delay_seconds", 0))
        max_delay = float(retry.get("max_delay_seconds", 0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid retry setting: {e}") from e
    if retries < 0:
        raise ConfigError("retry.retries must not be negative")
    if min_delay > max_delay:
        raise ConfigError("retry.min_delay_seconds must not exceed retry.max_delay_seconds")


def configure_logging(config=None, verbose=False):
    """Apply the ``logging`` section to the package logger; ``verbose`` forces DEBUG."""
    settings = (config or get_default_config()).get("logging", {})
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, str(settings.get("level", "INFO")).upper(), logging.INFO)
    logger.setLevel(level)

    fmt = settings.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """
    Recursively merge ``override_config`` into a copy of ``base_config``.

    Nested dicts are merged key by key; any other value replaces the base.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def _convert_env_value(value, current=None):
    """Convert an environment string to the type of the value it replaces."""
    if isinstance(current, str):
        return value
    if isinstance(current, list):
        return [part.strip() for part in value.split(',') if part.strip()]
    if isinstance(current, (int, float)) and not isinstance(current, bool):
        try:
            return int(value) if value.isdigit() else float(value)
        except ValueError:
            return value
    if value.lower() in ('true', '1', 'yes', 'on'):
        return True
    if value.lower() in ('false', '0', 'no', 'off'):
        return False
    return value


def _match_key(section, parts):
    """Longest key of ``section`` whose underscore-split form starts ``parts``."""
    best = None
    for key in section:
        key_parts = key.split('_')
        if parts[:len(key_parts)] == key_parts and (best is None or len(key_parts) > len(best.split('_'))):
            best = key
    return best


def apply_env_overrides(config):
    """
    Apply ``RELTAG_<SECTION>_<KEY>`` environment variables to ``config``.

    Keys may contain underscores themselves, so the variable name is
    matched greedily against the config keys at each level:
    ``RELTAG_RETRY_MAX_DELAY_SECONDS`` sets ``retry.max_delay_seconds``.
    Variables that match no setting are ignored.
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV_VAR:
            continue

        parts = env_key[len(ENV_PREFIX):].lower().split('_')
        section = config
        while parts:
            key = _match_key(section, parts)
            if key is None:
                break
            parts = parts[len(key.split('_')):]
            if not parts:
                if not isinstance(section[key], dict):
                    section[key] = _convert_env_value(value, section[key])
                break
            if isinstance(section[key], dict):
                section = section[key]
            else:
                break

    return config
