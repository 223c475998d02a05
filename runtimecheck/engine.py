"""
RuntimeCheck Support Decision Engine — Classify one API use against a target range.

Given the lifecycle record of a referenced API and the configured target
version range, decide which (if any) problem applies:

  - REMOVED:               the target could run a version that no longer has it
  - DEPRECATED:            the target could run a version where it is deprecated
  - NOT_YET_SUPPORTED:     the target could run a version that predates it
  - NOT_YET_EXPERIMENTAL:  experimental use is allowed, but the target could
                           run a version that predates even the experimental API

Decisions are conservative: a range that straddles a boundary "could
include" the problematic side and produces a finding. Checks are applied
in the order above and the first match wins, so each use yields exactly
one outcome. Everything here is a pure function of its arguments.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from packaging.version import Version

from runtimecheck.knowledge_base import LifecycleRecord, SupportInfo
from runtimecheck.version_range import VersionRange, at_least, caret


# Supported text for an API that only exists as an experimental feature
NONE_YET = "(none yet)"


class ClassificationKind(Enum):
    REMOVED = "removed"
    DEPRECATED = "deprecated"
    NOT_YET_SUPPORTED = "not-yet-supported"
    NOT_YET_EXPERIMENTAL = "not-yet-experimental"


@dataclass(frozen=True)
class Classification:
    """The outcome of classifying one use, with the data its message needs.

    Attributes:
        kind: Which problem applies
        since: Deprecation version (REMOVED/DEPRECATED), or the rendered
            "supported since" / "experimental since" text, possibly with
            backport annotations (e.g., "10.0.0 (backported: ^8.13.0)")
        removed: Removal version (REMOVED only)
    """
    kind: ClassificationKind
    since: str
    removed: Optional[str] = None


def supported_range(info: SupportInfo) -> VersionRange:
    """Versions that have the API: the main line onwards plus each backport line."""
    result = at_least(info.version)
    for backport in info.backported:
        result = result.union(caret(backport))
    return result


def unsupported_range(info: SupportInfo) -> VersionRange:
    """Versions that lack the API."""
    return supported_range(info).complement()


def could_include_at_or_after(target: VersionRange, boundary: Version) -> bool:
    return target.intersects(at_least(boundary))


def is_fully_supported(info: SupportInfo, target: VersionRange) -> bool:
    return not target.intersects(unsupported_range(info))


def classify(
    record: Optional[LifecycleRecord],
    target: VersionRange,
    allow_experimental: bool = False,
) -> Optional[Classification]:
    """Classify a use of an API.

    Args:
        record: The API's lifecycle record (None for untracked APIs).
        target: The configured target version range.
        allow_experimental: Whether experimental APIs count as usable.

    Returns:
        The Classification, or None when the use is fine for every version
        the target range could denote.
    """
    if record is None:
        return None

    deprecated = record.deprecated_at
    removed = record.removed_at

    if removed is not None and could_include_at_or_after(target, removed):
        return Classification(
            ClassificationKind.REMOVED, since=str(deprecated), removed=str(removed),
        )

    if deprecated is not None and could_include_at_or_after(target, deprecated):
        return Classification(ClassificationKind.DEPRECATED, since=str(deprecated))

    experimental = record.experimental_until
    if allow_experimental and experimental is not None:
        if is_fully_supported(experimental, target):
            return None
        return Classification(ClassificationKind.NOT_YET_EXPERIMENTAL, since=str(experimental))

    introduced = record.introduced_at
    if introduced is not None:
        if is_fully_supported(introduced, target):
            return None
        return Classification(ClassificationKind.NOT_YET_SUPPORTED, since=str(introduced))

    if experimental is not None:
        # Only ever shipped as experimental, and experimental use is not allowed
        return Classification(ClassificationKind.NOT_YET_SUPPORTED, since=NONE_YET)

    return None
