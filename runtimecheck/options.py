"""
RuntimeCheck Options — Parse and validate the run configuration.

Options are parsed once per run into a frozen ParsedOptions that is shared,
read-only, by every analysed file. Any problem is raised as a ConfigError
before analysis starts.

Accepted keys:
  - version: target version or range (default: project metadata, see
    version_detector)
  - ignoreModuleItems: decorated module API names to ignore ("fs.exists")
  - ignoreGlobalItems: decorated global API names to ignore ("new Buffer()")
  - allowExperimental: treat experimental APIs as usable
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from runtimecheck.errors import ConfigError
from runtimecheck.knowledge_base import REGISTRY, Registry
from runtimecheck.paths import Namespace
from runtimecheck.version_detector import detect_target_version
from runtimecheck.version_range import VersionRange, parse_range


logger = logging.getLogger(__name__)

OPTION_KEYS = frozenset({"version", "ignoreModuleItems", "ignoreGlobalItems", "allowExperimental"})


@dataclass(frozen=True)
class ParsedOptions:
    """Validated, immutable configuration for one run."""
    target_range: VersionRange
    ignored_global_names: frozenset[str] = frozenset()
    ignored_module_names: frozenset[str] = frozenset()
    allow_experimental: bool = False


def _ignore_set(raw: Mapping[str, Any], key: str, known: frozenset[str]) -> frozenset[str]:
    items = raw.get(key)
    if items is None:
        return frozenset()
    if not isinstance(items, (list, tuple)) or not all(isinstance(i, str) for i in items):
        raise ConfigError(f"'{key}' must be a list of API names")

    seen: set[str] = set()
    for item in items:
        if item in seen:
            raise ConfigError(f"'{key}' lists {item!r} more than once")
        seen.add(item)

    unknown = sorted(seen - known)
    if unknown:
        raise ConfigError(f"'{key}' has unknown API names: {', '.join(unknown)}")
    return frozenset(seen)


def parse_options(
    raw: Optional[Mapping[str, Any]] = None,
    registry: Optional[Registry] = None,
    project_dir: Optional[str | Path] = None,
) -> ParsedOptions:
    """Validate a raw option mapping and build ParsedOptions.

    Args:
        raw: The option mapping (e.g., loaded from a config file)
        registry: Registry the ignore names are validated against
        project_dir: Where to look for a default version when none is set

    Raises:
        ConfigError: On unknown keys, bad values, or an unparseable version.
    """
    raw = dict(raw or {})
    if registry is None:
        registry = REGISTRY

    unknown = sorted(set(raw) - OPTION_KEYS)
    if unknown:
        raise ConfigError(f"Unknown options: {', '.join(unknown)}")

    version = raw.get("version")
    if version is not None and not isinstance(version, str):
        raise ConfigError("'version' must be a string")

    allow_experimental = raw.get("allowExperimental", False)
    if not isinstance(allow_experimental, bool):
        raise ConfigError("'allowExperimental' must be true or false")

    options = ParsedOptions(
        target_range=parse_range(detect_target_version(version, project_dir)),
        ignored_global_names=_ignore_set(
            raw, "ignoreGlobalItems", registry.known_names(Namespace.GLOBALS)
        ),
        ignored_module_names=_ignore_set(
            raw, "ignoreModuleItems", registry.known_names(Namespace.MODULES)
        ),
        allow_experimental=allow_experimental,
    )
    logger.debug(f"Parsed options: target {options.target_range}, "
                 f"{len(options.ignored_global_names)} global and "
                 f"{len(options.ignored_module_names)} module ignores")
    return options


def load_config(filepath: str | Path) -> dict[str, Any]:
    """Load a raw option mapping from a YAML or JSON file.

    Raises:
        ConfigError: If the file cannot be read or does not hold a mapping.
    """
    filepath = Path(filepath)
    try:
        text = filepath.read_text(encoding="utf-8")
        if filepath.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not load config {filepath}: {e}") from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {filepath} must contain a mapping of options")
    return data
