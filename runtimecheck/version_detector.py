"""
RuntimeCheck Version Detector — Work out which runtime versions a project targets.

When no version is configured explicitly, the target range comes from the
project's own metadata:
  1. The "engines.node" field of the nearest package.json at or above the
     project directory
  2. Otherwise DEFAULT_VERSION
"""

import json
import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

DEFAULT_VERSION = ">=16.0.0"

MANIFEST_NAME = "package.json"


def find_manifest(project_dir: str | Path) -> Optional[Path]:
    """Find the nearest package.json at or above a directory.

    Args:
        project_dir: Directory to start from (e.g., the directory of a scanned file)

    Returns:
        Path to the manifest, or None if there is none up to the filesystem root.
    """
    current = Path(project_dir).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    return None


def read_engines_version(manifest: str | Path) -> Optional[str]:
    """Read the engines.node range from a package.json.

    Returns:
        The range text, or None if the manifest is unreadable or has no entry.
    """
    manifest = Path(manifest)
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {manifest}: {e}")
        return None

    engines = data.get("engines") if isinstance(data, dict) else None
    version = engines.get("node") if isinstance(engines, dict) else None
    if isinstance(version, str) and version.strip():
        return version.strip()
    return None


def detect_target_version(
    configured: Optional[str] = None,
    project_dir: Optional[str | Path] = None,
) -> str:
    """Resolve the target version specifier for a run.

    Args:
        configured: The explicitly configured specifier, if any
        project_dir: Where to look for project metadata

    Returns:
        A version specifier string (not yet parsed).
    """
    if configured is not None:
        logger.debug(f"Using configured target version {configured!r}")
        return configured

    if project_dir is not None:
        manifest = find_manifest(project_dir)
        if manifest is not None:
            version = read_engines_version(manifest)
            if version is not None:
                logger.debug(f"Using engines.node {version!r} from {manifest}")
                return version

    logger.debug(f"No target version found, defaulting to {DEFAULT_VERSION!r}")
    return DEFAULT_VERSION
