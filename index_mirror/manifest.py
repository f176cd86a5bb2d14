"""
Project manifest lookup.

Resolves which release to mirror from a composer-style JSON manifest
(``extra.wp-engine.wordpress``) and turns it into an index URL.
"""

import json
import os
from typing import Optional

from .utils.constants import DEFAULT_INDEX_BASE, DEFAULT_RELEASE
from .utils.errors import ManifestError
from .utils.log import get_logger

logger = get_logger("manifest")


def read_manifest_config(path: str) -> Optional[dict]:
    """
    Read the ``extra.wp-engine`` section of a manifest.

    Args:
        path: Path to the manifest (composer.json)

    Returns:
        The section as a dict, or None if the file or section is missing

    Raises:
        ManifestError: If the file exists but is not a JSON object, or extra is not an object
    """
    if not os.path.exists(path):
        logger.debug(f"No manifest at {path}")
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ManifestError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ManifestError(path, "top level is not an object")

    extra = data.get('extra')
    if extra is None:
        return None
    if not isinstance(extra, dict):
        raise ManifestError(path, "extra is not an object")

    section = extra.get('wp-engine')
    return section if isinstance(section, dict) else None


def read_manifest_version(path: str, default: str = DEFAULT_RELEASE) -> str:
    """
    Get the release version requested by a manifest.

    Args:
        path: Path to the manifest
        default: Version used when the manifest does not name one

    Returns:
        Version string

    Raises:
        ManifestError: If the manifest is invalid or the version is not a string
    """
    config = read_manifest_config(path) or {}
    version = config.get('wordpress')
    if version is None or version == "":
        return default
    # JSON numbers lose trailing zeros (6.10 reads as 6.1)
    if not isinstance(version, str):
        raise ManifestError(path, f"wordpress version must be a string, got {version!r}")
    return version


def release_url(version: str, base: str = DEFAULT_INDEX_BASE) -> str:
    """
    Build the index URL of a tagged release.

    Args:
        version: Release version (e.g. "6.9")
        base: Index URL the release tags live under

    Returns:
        Root listing URL for that release
    """
    return f"{base.rstrip('/')}/{version}"


def is_installed(target_dir: str) -> bool:
    """Check whether a previous mirror already populated target_dir."""
    return os.path.isdir(target_dir) and bool(os.listdir(target_dir))
